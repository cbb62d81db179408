import setuptools
import os
import os.path


# Get the readme file
if os.path.isfile("README.md"):
    with open("README.md", "r") as fh:
        long_description = fh.read()
else:
    long_description = ""

setuptools.setup(
    name="vmc_toolkit",
    version="0.0.0",
    description="Slater-determinant configurations and local estimators for Variational Monte Carlo",
    long_description=long_description,
    long_description_content_type="text/markdown",
    project_urls={},
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    package_dir={
        "vmc_toolkit": "vmc_toolkit",
        "vmc_toolkit.modeling": "vmc_toolkit/modeling",
        "vmc_toolkit.models": "vmc_toolkit/models",
        "vmc_toolkit.montecarlo": "vmc_toolkit/montecarlo",
        "vmc_toolkit.operators": "vmc_toolkit/operators",
        "vmc_toolkit.tools": "vmc_toolkit/tools",
        "vmc_toolkit.workflows": "vmc_toolkit/workflows",
    },
    packages=[
        "vmc_toolkit",
        "vmc_toolkit.modeling",
        "vmc_toolkit.models",
        "vmc_toolkit.montecarlo",
        "vmc_toolkit.operators",
        "vmc_toolkit.tools",
        "vmc_toolkit.workflows",
    ],
    python_requires=">=3.10",
    install_requires=["numpy", "scipy", "numba"],
    extras_require={"test": ["pytest"]},
)
