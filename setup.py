#!/usr/bin/env python

import os
import re
from setuptools import setup, find_packages


install_requires = [
    'geopandas',
    'matplotlib',
    'netcdf4',
    'numpy',
    'progressbar2',
    'pyproj',
    'rasterio',
    'scipy',
    'shapely >=2.0,<3.0',
    'xarray']

here = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(here, 'goa_ecopath', '__init__.py')) as f:
    init_file = f.read()

version = re.search(r'{}\s*=\s*[(]([^)]*)[)]'.format('__version_info__'),
                    init_file).group(1).replace(', ', '.')

setup(name='goa_ecopath',
      version=version,
      description='Tools for building Gulf of Alaska Ecopath model masks '
                  'from NMFS statistical areas and bathymetry, and for '
                  'extracting ROMS-NPZ output on those masks',
      license='BSD',
      classifiers=[
          'Development Status :: 4 - Beta',
          'License :: OSI Approved :: BSD License',
          'Operating System :: OS Independent',
          'Intended Audience :: Science/Research',
          'Programming Language :: Python',
          'Programming Language :: Python :: 3',
          'Topic :: Scientific/Engineering',
      ],
      packages=find_packages(include=['goa_ecopath', 'goa_ecopath.*']),
      package_data={'goa_ecopath': ['default.cfg']},
      install_requires=install_requires,
      extras_require={'test': ['pytest']},
      entry_points={'console_scripts':
                    ['goa_ecopath = goa_ecopath.__main__:main',
                     'build_ecopath_masks = goa_ecopath.mask.build:main',
                     'extract_ecopath_variables = '
                     'goa_ecopath.roms.extract:main']})
