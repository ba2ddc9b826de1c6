"""
Setup configuration for pcm-analysis.
"""

from setuptools import setup, find_packages

setup(
    name='pcm-analysis',
    version='1.0.0',
    description='Single-pass streaming analysis of decoded PCM audio: silence, segments, peaks and spectra',
    author='PCM Analysis Team',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.11',
    install_requires=[
        'numpy>=1.24.0',
        'scipy>=1.10.0',
        'soundfile>=0.12.0',
        'soxr>=0.3.0',
    ],
    extras_require={
        'dev': [
            'pytest>=7.4.0',
            'pytest-cov>=4.1.0',
            'pylint>=2.17.0',
            'flake8>=6.0.0',
            'black>=23.0.0',
            'mypy>=1.4.0',
        ]
    }
)
