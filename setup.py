from setuptools import setup, find_packages

setup(
    name="smtp-mailer",
    version="0.1.0",
    description="Web endpoint that validates send requests, renders fixed Jinja2 email templates and relays them over SMTP",
    author="",
    author_email="",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"smtp_mailer": ["templates/*.jinja2", "templates/*.yaml"]},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "Flask>=2.2.0",
        "Jinja2>=3.0.0",
        "MarkupSafe>=2.0.0",
        "python-dotenv>=0.19.0",
        "click>=8.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.2.0",
        "PyYAML>=5.4.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "smtp-mailer=smtp_mailer.cli:main",
        ],
    },
)
