from setuptools import setup, find_packages
import re
from pathlib import Path


def read_readme():
    readme_file = Path(__file__).parent / 'README.md'
    if readme_file.exists():
        return readme_file.read_text(encoding='utf-8')
    return ""


def get_version():
    init_file = Path(__file__).parent / 'restapi' / '__init__.py'
    match = re.search(r'__version__\s*=\s*["\']([^"\']+)["\']', init_file.read_text(encoding='utf-8'))
    if match:
        return match.group(1)
    return "0.1.0"


setup(
    name="restapi-plugin",
    version=get_version(),
    description="REST API action plugin: request normalization, curl rendering and execution.",
    long_description=read_readme(),
    long_description_content_type='text/markdown',
    packages=find_packages(include=['restapi', 'restapi.*']),
    python_requires=">=3.11",
    install_requires=[
        "httpx>=0.27",
        "pydantic>=2.5",
        "jinja2>=3.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords="rest http api plugin curl httpx",
)
