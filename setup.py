from pathlib import Path

from setuptools import find_packages, setup  # isort: skip


HERE = Path(__file__).resolve().parent


def get_version():
    namespace = {}
    exec((HERE / "redis_opentracing" / "version.py").read_text(), namespace)
    return namespace["__version__"]


def get_long_description():
    readme = HERE / "README.md"
    return readme.read_text(encoding="utf-8") if readme.exists() else ""


setup(
    name="redis-opentracing",
    version=get_version(),
    description="OpenTracing instrumentation for the redis-py client",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    license="BSD-3-Clause",
    packages=find_packages(exclude=["tests*"]),
    package_data={
        "redis_opentracing": ["py.typed"],
    },
    zip_safe=False,
    python_requires=">=3.8",
    install_requires=[
        "envier>=0.5,<1",
        "opentracing>=2.4.0",
        "wrapt>=1.14",
    ],
    extras_require={
        "redis": ["redis>=4.2"],
        "dev": ["riot"],
        "test": [
            "hypothesis",
            "pytest",
            "pytest-randomly",
            "redis>=4.2",
        ],
    },
    classifiers=[
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
