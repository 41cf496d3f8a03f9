"""
Setup file.
"""

import os

from setuptools import setup

URL = "https://github.com/vexide/v5build"
KEYWORDS = "embedded vex v5 robotics rust cargo vexide pros firmware simulator"
HERE = os.path.dirname(os.path.abspath(__file__))



if __name__ == "__main__":
    setup(
        maintainer="vexide contributors",
        keywords=KEYWORDS,
        url=URL,
        package_data={
            "v5build.build": ["assets/*.json"],
            "v5build.templates": ["assets/*.tar.gz"],
        },
        include_package_data=True)
