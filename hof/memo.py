# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Invocation caches: wrappers that elide repeated calls to the wrapped function.
* `once` runs the function on the first call only; every later call returns that first result, whatever its arguments.
* `memoize` runs the function once per distinct canonical argument key (see `hof.key`).

If the wrapped function raises, nothing is stored and the exception propagates; the next call tries again.

A recursive call that needs the very result being computed on the same thread cannot wait for it:
`memoize` returns its sentinel to such a call, and `once` raises RuntimeError.
Calls on other threads wait for that result instead.
The lock is never held while the wrapped function runs.
'''

from functools import update_wrapper
from threading import Condition, get_ident, Lock
from types import MethodType
from typing import Any, Callable, Hashable, MutableMapping

from .key import arg_key
from .store import LRUStore
from .trace import fn_name, trace


__all__ = ['KeyFn', 'Memoized', 'Once', 'memoize', 'once']


KeyFn = Callable[...,Hashable]


class _Cache:

  kind = ''

  def __init__(self, fn:Callable, store:MutableMapping[Hashable,Any]) -> None:
    if not callable(fn): raise TypeError(f'{self.kind}: fn must be callable; received: {fn!r}')
    self.fn = fn
    self.store = store
    self.hits = 0
    self.misses = 0
    self._cond = Condition(Lock())
    self._in_flight:dict[Hashable,int] = {} # Maps keys being computed to the computing thread id.
    update_wrapper(self, fn, updated=()) # Copy the name and doc, but not the attributes of another wrapper.


  def __get__(self, obj:Any, cls:type|None=None) -> Callable:
    if obj is None: return self
    return MethodType(self, obj)


  def _call(self, key:Hashable, args:tuple, kwargs:dict[str,Any]) -> Any:
    tid = get_ident()
    with self._cond:
      while True:
        try: res = self.store[key]
        except KeyError: pass
        else:
          self.hits += 1
          hit = True
          break
        owner = self._in_flight.get(key)
        if owner is None:
          self._in_flight[key] = tid
          self.misses += 1
          hit = False
          break
        if owner == tid: return self._reentered()
        self._cond.wait()

    if hit:
      trace(memo=self.kind, fn=fn_name(self.fn), event='hit')
      return res

    trace(memo=self.kind, fn=fn_name(self.fn), event='miss')
    try: res = self.fn(*args, **kwargs)
    except BaseException:
      with self._cond:
        del self._in_flight[key]
        self._cond.notify_all()
      raise
    with self._cond:
      self.store[key] = res
      del self._in_flight[key]
      self._cond.notify_all()
    return res


  def _reentered(self) -> Any: raise NotImplementedError


class Once(_Cache):
  '''
  Wrapper that invokes `fn` on the first successful call only.
  All later calls return the stored result without invoking `fn`, regardless of the arguments passed.
  '''

  kind = 'once'

  def __init__(self, fn:Callable) -> None:
    super().__init__(fn, store={})


  def __repr__(self) -> str: return f'<Once {fn_name(self.fn)}{" (done)" if self.has_run else ""}>'


  @property
  def has_run(self) -> bool: return bool(self.store)


  @property
  def result(self) -> Any:
    'The stored result. Raises ValueError if the function has not yet completed.'
    try: return self.store[None]
    except KeyError as e: raise ValueError(f'{fn_name(self.fn)} has not run') from e


  def __call__(self, *args:Any, **kwargs:Any) -> Any:
    return self._call(None, args, kwargs)


  def _reentered(self) -> Any:
    raise RuntimeError(f'{fn_name(self.fn)}: re-entrant call to once before its first call completed')


class Memoized(_Cache):
  '''
  Wrapper that caches results of `fn` by argument key.
  `key` optionally overrides key derivation; it is called with the same arguments as `fn` and must return a hashable value.
  The default key is `hof.key.arg_key`, which raises SerializationError for arguments with no canonical form.
  This includes the instance passed to a decorated method, unless its type is registered with `hof.key.encode_key`;
  methods therefore usually need a `key`, e.g. `key=lambda self, x: (self.name, x)`.
  `sentinel` is returned to a recursive call for the key that is being computed on the same thread.
  `store` is any MutableMapping; the default is an unbounded dict.
  '''

  kind = 'memoize'

  def __init__(self, fn:Callable, key:KeyFn|None=None, store:MutableMapping[Hashable,Any]|None=None, sentinel:Any=Ellipsis) -> None:
    if key is not None and not callable(key): raise TypeError(f'memoize: key must be callable; received: {key!r}')
    super().__init__(fn, store=({} if store is None else store))
    self.key = key
    self.sentinel = sentinel


  def __repr__(self) -> str: return f'<Memoized {fn_name(self.fn)} len={len(self.store)}>'


  def __call__(self, *args:Any, **kwargs:Any) -> Any:
    k = arg_key(args, kwargs) if self.key is None else self.key(*args, **kwargs)
    return self._call(k, args, kwargs)


  def _reentered(self) -> Any: return self.sentinel


def once(fn:Callable) -> Once:
  'Decorator: `@once`. Equivalent to `Once(fn)`.'
  return Once(fn)


def memoize(_fn:Callable|None=None, *, key:KeyFn|None=None, store:MutableMapping[Hashable,Any]|None=None,
 maxsize:int|None=None, sentinel:Any=Ellipsis) -> Any:
  '''
  Memoization decorator, usable either bare (`@memoize`) or with options (`@memoize(maxsize=128)`).
  `maxsize` is shorthand for `store=LRUStore(maxsize)`.
  '''
  if maxsize is not None and store is not None: raise ValueError('memoize: specify either `store` or `maxsize`, not both')
  if maxsize is not None: LRUStore(maxsize) # Validate eagerly.

  def _memoize(fn:Callable) -> Memoized:
    s = LRUStore(maxsize) if maxsize is not None else store
    return Memoized(fn, key=key, store=s, sentinel=sentinel)

  if _fn is None: # Called with parens.
    return _memoize
  else: # Called without parens.
    return _memoize(_fn)
