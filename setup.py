from setuptools import find_packages, setup


def read_file(file):
    with open(file, 'rb') as fh:
        data = fh.read()
    return data.decode('utf-8')


setup(name='shpimport',
      version='1.0.0',
      description='Import ESRI Shapefiles into CAD drawings',
      long_description=read_file('README.md'),
      long_description_content_type='text/markdown',
      license='MIT',
      package_dir={'': 'src'},
      packages=find_packages('src'),
      zip_safe=False,
      keywords='gis cad dxf shapefile shapefiles import',
      python_requires='>= 3.9',
      extras_require={
          'dxf': ['ezdxf>=1.1'],
          'test': ['pytest>=7', 'ezdxf>=1.1'],
      },
      entry_points={
          'console_scripts': ['shpimport=shpimport.cli:main'],
      },
      classifiers=['Programming Language :: Python',
                   'Programming Language :: Python :: 3',
                   'Topic :: Scientific/Engineering :: GIS',
                   'Topic :: Multimedia :: Graphics :: Editors :: Vector-Based',
                   'Topic :: Software Development :: Libraries :: Python Modules'])
