#!/usr/bin/env python3

from setuptools import setup, find_packages
import os

directory = os.path.dirname(os.path.realpath(__file__))


if __name__ == "__main__":
    setup(
        name="shadernudge",
        packages=find_packages(include=["shadernudge", "shadernudge.*"]),
        python_requires='>3.10.0',
        version="0.1.0",
        license="MIT",
        description="GLSL editor that streams nudged literals to a live renderer",
        long_description=open(os.path.join(
            directory, "README.md"), "r", encoding="utf8").read(),
        long_description_content_type="text/markdown",
        keywords=["glsl", "shader", "live-coding", "blender"],
        classifiers=[],
        include_package_data=True,
        install_requires=[
            "PyQt6>=6.4",
            "websockets>=14.0",
        ],
        extras_require={
            "test": ["pytest"],
        },
        entry_points={
            "gui_scripts": [
                "shadernudge = shadernudge.__main__:main",
            ],
        },
        zip_safe=False,
    )
