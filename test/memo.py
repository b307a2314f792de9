#!/usr/bin/env python3

from enum import Enum
from threading import Event, Thread

from utest import *
from hof.exceptions import SerializationError
from hof.memo import *
from hof.store import LRUStore


add_args = []

@memoize
def add(a, b):
  add_args.append((a, b))
  return a + b

utest(5, add, 2, 3)
utest(5, add, 2, 3)
utest(9, add, 4, 5)
utest(9, add, 4, 5)
utest(5.0, add, 2.0, 3) # Differs in type from (2, 3).
utest(5, add, a=2, b=3) # Keyword arguments make a different key from positional ones.
utest(5, add, b=3, a=2) # Keyword order does not matter.
utest_val([(2, 3), (4, 5), (2.0, 3), (2, 3)], add_args, desc='@memoize call history')
utest_val((3, 4), (add.hits, add.misses), desc='@memoize hits and misses')


def memoize_structural_keys():
  calls = []
  @memoize
  def f(x):
    calls.append(x)
    return len(calls)
  return [f({'a': [1, 2], 'b': {3}}), f({'b': {3}, 'a': [1, 2]}), f({'a': (1, 2), 'b': {3}}), f([1, 2]), f([2, 1])], len(calls)

utest(([1, 1, 2, 3, 4], 4), memoize_structural_keys)


def memoize_failure_not_stored():
  attempts = []
  @memoize
  def flaky(x):
    attempts.append(x)
    if len(attempts) == 1: raise ValueError('first attempt')
    return x * 2
  utest_exc(ValueError('first attempt'), flaky, 3)
  return flaky(3), flaky(3), attempts, dict(flaky.store)

utest((6, 6, [3, 3], {'i3': 6}), memoize_failure_not_stored)


def memoize_cyclic():
  @memoize
  def f(x): return x
  a = [1]
  a.append(a)
  f(a)

utest_exc(SerializationError, memoize_cyclic)


def memoize_function_arg():
  @memoize
  def f(x): return x
  return f(len)

utest_exc(SerializationError, memoize_function_arg)


def memoize_custom_key():
  calls = []
  @memoize(key=lambda fn, n: (fn.__name__, n))
  def apply(fn, n):
    calls.append(n)
    return fn(n)
  return apply(str, 1), apply(str, 1), apply(repr, 1), calls

utest(('1', '1', '1', [1, 1]), memoize_custom_key)


def memoize_bounded():
  calls = []
  @memoize(maxsize=2)
  def sq(x):
    calls.append(x)
    return x * x
  for x in [1, 2, 1, 3, 2, 1]: sq(x)
  return calls, len(sq.store), sq.store.evictions

utest(([1, 2, 3, 2, 1], 2, 3), memoize_bounded)


def memoize_recursive():
  @memoize
  def fib(n): return n if n < 2 else fib(n - 1) + fib(n - 2)
  return fib(80), fib.misses

utest((23416728348467685, 81), memoize_recursive)


def memoize_recursive_same_key():
  'A recursive call with the same key receives the sentinel.'
  @memoize(sentinel=None)
  def f(x):
    inner = f(x)
    return ('outer', inner)
  return f(1)

utest(('outer', None), memoize_recursive_same_key)


def memoize_method():
  class Box:
    def __init__(self, n): self.n = n
    def __repr__(self): return f'Box({self.n})'
    @memoize(key=lambda self, k: (self.n, k))
    def scale(self, k): return self.n * k
  b = Box(3)
  return b.scale(2), b.scale(2), Box.scale.misses

utest((6, 6, 1), memoize_method)


def memoize_method_default_key():
  'The instance of a plain class has no canonical form, so a method memoized without `key` raises.'
  class Box:
    @memoize
    def get(self): return 1
  Box().get()

utest_exc(SerializationError, memoize_method_default_key)


def make_enum(a):
  class Mode(Enum):
    on = a
  return Mode

def memoize_local_enums():
  'Members of two local enum classes with the same name and member must not share a result.'
  @memoize
  def value(m): return m.value
  M1 = make_enum(1)
  M2 = make_enum(2)
  utest_exc(SerializationError, value, M1.on)
  utest_exc(SerializationError, value, M2.on)
  return value.misses, len(value.store)

utest((0, 0), memoize_local_enums)


def memoize_threads():
  'Concurrent callers for the same key wait for the first result.'
  started = Event()
  release = Event()
  calls = []
  @memoize
  def slow(x):
    calls.append(x)
    started.set()
    release.wait(timeout=5)
    return x + 1
  results = []
  threads = [Thread(target=lambda: results.append(slow(1))) for _ in range(4)]
  threads[0].start()
  started.wait(timeout=5)
  for t in threads[1:]: t.start()
  release.set()
  for t in threads: t.join(timeout=5)
  return calls, results

utest(([1], [2, 2, 2, 2]), memoize_threads)


utest_exc(ValueError('memoize: specify either `store` or `maxsize`, not both'), memoize, store={}, maxsize=2)
utest_exc(ValueError('maxsize must be positive; received: 0'), memoize, maxsize=0)
utest_exc(TypeError('memoize: fn must be callable; received: 1'), Memoized, 1)


side_effects = []

@once
def init(x=0):
  side_effects.append(x)
  return f'init {x}'

utest(False, lambda: init.has_run)
utest('init 1', init, 1)
utest('init 1', init, 2)
utest('init 1', init)
utest_val([1], side_effects, desc='@once side effects')
utest_val((True, 'init 1'), (init.has_run, init.result), desc='@once state')


def once_retry_after_error():
  attempts = []
  def f():
    attempts.append(1)
    if len(attempts) == 1: raise RuntimeError('not yet')
    return 'ok'
  o = Once(f)
  utest_exc(RuntimeError('not yet'), o)
  ran = o.has_run
  return ran, o(), o(), len(attempts)

utest((False, 'ok', 'ok', 2), once_retry_after_error)


def once_unhashable_args():
  o = Once(lambda *args, **kwargs: (args, kwargs))
  return o([1], k={}), o(lambda: None)

utest(((([1],), {'k': {}}), (([1],), {'k': {}})), once_unhashable_args)

utest_exc(ValueError, lambda: Once(print).result)


def once_reentrant():
  'A call from within the first call cannot return the first result, which does not exist yet.'
  inner = []
  @once
  def setup():
    try: setup()
    except RuntimeError as e: inner.append(str(e))
    return 'done'
  return setup(), setup(), inner

utest(('done', 'done', ['once_reentrant.<locals>.setup: re-entrant call to once before its first call completed']), once_reentrant)


def memoize_explicit_store():
  store = LRUStore(1)
  m = Memoized(lambda x: -x, store=store)
  return m(1), m(2), m(1), list(store.items()), m.misses

utest((-1, -2, -1, [('i1', -1)], 3), memoize_explicit_store)
