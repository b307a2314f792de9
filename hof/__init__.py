# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
hof: higher-order function wrappers for call gating (debounce, throttle) and invocation caching (once, memoize).
'''

from .exceptions import *
from .functional import *
from .gate import *
from .key import *
from .memo import *
from .sched import *
from .store import *
