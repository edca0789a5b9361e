"""
Setup file.
"""

import os

from setuptools import setup

URL = "https://github.com/uepack/uepack"
KEYWORDS = "unreal engine ue4 ue5 plugin package RunUAT BuildPlugin build automation"
HERE = os.path.dirname(os.path.abspath(__file__))



if __name__ == "__main__":
    setup(
        keywords=KEYWORDS,
        url=URL,
        include_package_data=True)
