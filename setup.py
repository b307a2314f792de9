# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from setuptools import find_packages, setup


setup(
  name='hof',
  version='0.1.0',
  description='hof: higher-order function wrappers for debounce, throttle, once and memoize.',
  python_requires='>=3.11',

  packages=find_packages(include=['hof', 'hof.*']),
  py_modules=['utest'],
)
