from setuptools import setup, find_packages

setup(
    name="memdata",
    version="0.1",
    description="In-memory data modeling with live relations between pydantic models",
    packages=find_packages(include=["memdata", "memdata.*"]),
    install_requires=[
        "pydantic>=2.8.2, <3",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        # Classifiers help users find your project by categorizing it.
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.10',
)
