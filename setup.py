from setuptools import setup, find_packages

setup(
    name="bounded-fib",
    version="1.0.0",
    packages=find_packages(where="src/main/python"),
    package_dir={"": "src/main/python"},
    py_modules=["bounded_fib_service"],
    install_requires=[
        "grpcio",
        "grpcio-health-checking",
        "protobuf",
        "python-dotenv",
        "pyyaml",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "bounded-fib=bounded_fib.console:main",
        ],
    },
    python_requires=">=3.8",
    description="A bounded Fibonacci sequence generator and bounds-checked index accessor, with a gRPC service",
    author="YAPPY Team",
    author_email="yappy@example.com",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
)
