from setuptools import setup, find_namespace_packages

setup(
    name="dataset_augmentor",
    version="0.1.0",
    description="Deterministic, reproducible image dataset augmentation for ML pipelines.",
    packages=find_namespace_packages(include=["dataset_augmentor", "dataset_augmentor.*"]),
    py_modules=["run_augmentation"],
    install_requires=[
        "numpy",
        "pyyaml",
        "opencv-python-headless",
        "imageio",
        "tifffile",
        "tqdm",
        "pydantic>=2",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'augment-dataset=run_augmentation:main',
        ],
    },
    python_requires='>=3.10',
)
