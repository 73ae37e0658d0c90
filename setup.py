from setuptools import setup, find_packages

setup(
    name="agentic-editor",
    version="0.1.0",
    packages=find_packages(include=["agentic_editor", "agentic_editor.*"]),
    install_requires=[
        "pyyaml",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "agentic-editor=agentic_editor.cli:main",
        ],
    },
    python_requires=">=3.10",
    author="Uday Kanth",
    description="Resilient tool-call parsing, edit verification and document merge for LLM editing agents.",
)
