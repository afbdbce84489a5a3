from setuptools import setup, find_packages

setup(
    name="stormchaser-path-planner",
    version="1.0.0",
    description="Field path planner: waypoints, events and playback over a field image",
    packages=find_packages(include=["planner", "planner.*"]),
    py_modules=["main", "doctor"],
    include_package_data=True,
    install_requires=[
        "pygame>=2.1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
)
