from setuptools import setup, find_packages

setup(
    name='handshake-camera',
    version='1.0.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.9',
    install_requires=[
        'setuptools',
        'numpy>=1.23',
        'opencv-python>=4.8',
        'mediapipe>=0.10.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    zip_safe=True,
    maintainer='Hasan Çoban',
    maintainer_email='hasancoban@std.iyte.edu.tr',
    description='Automatic photo capture when two hands meet in front of the camera',
    license='MIT',
    tests_require=['pytest'],
    entry_points={
        'console_scripts': [
            'handshake-camera = handshake_camera.main:main',
        ],
    },
)
