import setuptools

with open("README.rst", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="eyeoptics",
    version="0.1.0",
    author="eyeoptics developers",
    description="Geometric optics of model eyes: ray tracing through quadric "
                "surfaces and eye pose estimation from the imaged pupil",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    license="BSD-3-Clause",
    package_dir={'': 'src'},
    packages=setuptools.find_packages(where='src'),
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Topic :: Scientific/Engineering :: Physics",
    ],
    keywords=['geometric optics', 'ray tracing', 'quadric surfaces',
              'schematic eye', 'eye tracking', 'pupil', 'eye pose'],
    install_requires=[
        "opticalglass",
        "numpy>=1.15.0",
        "scipy>=1.5.0",
        "attrs>=18.1.0",
        "transforms3d>=0.3.1"
        ],
    extras_require={
        'test': ["pytest"],
    },
)
