"""
Setup script for CssImageEmbedder.
"""

from setuptools import setup
import os

# Read the contents of README.md
this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

# Read version from the main script
with open(os.path.join(this_directory, 'css_image_embedder.py'), encoding='utf-8') as f:
    for line in f:
        if line.startswith('__version__'):
            version = line.split('=')[1].strip().strip('"\'')
            break

setup(
    name="css-image-embedder",
    version=version,
    description="Embeds files referenced by stylesheet url() values as base64 data URIs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    keywords=["css", "data-uri", "base64", "inline", "stylesheet"],
    # Flat layout: every module lives at the top level
    py_modules=["css_image_embedder", "embed_options", "http_client", "image_processor",
                "stylesheet_rewriter", "url_embedder", "utils"],
    entry_points={
        "console_scripts": [
            "css-image-embedder=css_image_embedder:main",
        ],
    },
    install_requires=[
        "pillow>=8.0.0",
        "requests>=2.25.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Environment :: Console",
        "Topic :: Software Development :: Build Tools",
        "Topic :: Text Processing :: Markup",
        "Topic :: Utilities",
    ],
    python_requires=">=3.8",
)
