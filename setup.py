from setuptools import setup, find_packages


# ==================================
# Runtime and test dependency lists
# ==================================
install_requires = [
    "numpy>=1.24",          # planes
    "scipy>=1.10",          # 2D DCT-II / DCT-III
    "numba>=0.58",          # laplacian kernel
    "opencv-python>=4.8",   # image read/write
    "tqdm>=4.65",           # progress bars
]

extras_require = {
    "test": [
        "pytest>=7.4",
    ],
}


# ===============================
# Setup run by 'pip install -e .'
# ===============================
setup(
    name="retinex_pde",
    version="1.0.0",
    description="Retinex Poisson Equation: illumination removal by solving a Poisson PDE in the DCT domain",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10",
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "retinex-pde = retinex_pde.cli:main",
        ],
    },
    zip_safe=False,
)
