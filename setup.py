"""
actionlambda セットアップファイル
"""

from setuptools import setup, find_packages
import os


# README を読み込み
def read_readme():
    try:
        with open("README.md", "r", encoding="utf-8") as fh:
            return fh.read()
    except FileNotFoundError:
        return "宣言的なアクションを AWS Lambda のハンドラーとして動かすアダプター"


# バージョンを取得
def get_version():
    version_file = os.path.join("actionlambda", "__init__.py")
    with open(version_file, "r", encoding="utf-8") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split('"')[1]
    return "0.1.0"


setup(
    name="actionlambda",
    version=get_version(),
    description="宣言的なアクションを AWS Lambda のハンドラーとして動かすアダプター",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["actionlambda", "actionlambda.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.10",
    install_requires=[
        # Lambda 環境では標準ライブラリのみを使用
    ],
    extras_require={
        "speedups": [
            "orjson>=3.9.0",
        ],
        "test": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
        ],
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.900",
            "isort>=5.0",
            "bandit[toml]>=1.7",
            "safety>=2.0",
            "orjson>=3.9.0",
        ],
    },
    keywords="lambda aws serverless action adapter api-gateway authorizer",
)
