# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Stateless functional helpers.
'''

from functools import partial as _partial, update_wrapper
from inspect import Parameter, signature
from itertools import zip_longest
from typing import Any, Callable, Iterable, Mapping, TypeVar


__all__ = ['compose', 'curry', 'identity', 'omit', 'partial', 'pick', 'pipe', 'zip_all']


_K = TypeVar('_K')
_V = TypeVar('_V')


def identity(x:Any) -> Any: return x


def partial(fn:Callable, *args:Any, **kwargs:Any) -> Callable:
  'Bind leading positional and keyword arguments. This is `functools.partial`.'
  return _partial(fn, *args, **kwargs)


class curry:
  '''
  Curried function wrapper.
  Positional arguments accumulate across calls; once `arity` of them have been supplied, `fn` is called.
  Keyword arguments accumulate as well and are passed to the final call.
  `arity` defaults to the number of required positional parameters of `fn`.
  '''

  def __init__(self, fn:Callable, arity:int|None=None, _args:tuple=(), _kwargs:dict[str,Any]|None=None) -> None:
    if arity is None: arity = required_positional_count(fn)
    if arity < 0: raise ValueError(f'arity must be nonnegative; received: {arity!r}')
    self.fn = fn
    self.arity = arity
    self.args = _args
    self.kwargs = _kwargs or {}
    update_wrapper(self, fn, updated=()) # Copy the name and doc, but not the attributes of another wrapper.

  def __repr__(self) -> str:
    return f'<curry {getattr(self.fn, "__qualname__", self.fn)} {len(self.args)}/{self.arity}>'

  def __call__(self, *args:Any, **kwargs:Any) -> Any:
    a = self.args + args
    kw = {**self.kwargs, **kwargs}
    if len(a) >= self.arity: return self.fn(*a, **kw)
    return curry(self.fn, self.arity, a, kw)


def required_positional_count(fn:Callable) -> int:
  kinds = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)
  return sum(1 for p in signature(fn).parameters.values() if p.kind in kinds and p.default is Parameter.empty)


def _pipe(fns:tuple[Callable,...], *args:Any, **kwargs:Any) -> Any:
  first, *rest = fns
  x = first(*args, **kwargs)
  for f in rest:
    x = f(x)
  return x


def pipe(*fns:Callable) -> Callable:
  '''
  Left-to-right composition: `pipe(f, g)(x) == g(f(x))`.
  The first function may take any arguments; the rest take the previous result.
  With no functions, return `identity`.
  '''
  if not fns: return identity
  if len(fns) == 1: return fns[0]
  return _partial(_pipe, fns)


def compose(*fns:Callable) -> Callable:
  'Right-to-left composition, as in mathematical notation: `compose(f, g)(x) == f(g(x))`.'
  return pipe(*reversed(fns))


def pick(mapping:Mapping[_K,_V], *keys:_K) -> dict[_K,_V]:
  'Return a new dict of the items of `mapping` whose keys are in `keys`, in the order given. Absent keys are skipped.'
  return {k: mapping[k] for k in keys if k in mapping}


def omit(mapping:Mapping[_K,_V], *keys:_K) -> dict[_K,_V]:
  'Return a new dict of the items of `mapping` whose keys are not in `keys`.'
  excluded = set(keys)
  return {k: v for k, v in mapping.items() if k not in excluded}


def zip_all(*seqs:Iterable, fill:Any=None) -> list[tuple]:
  'Zip `seqs` into a list of tuples, padding the shorter inputs with `fill` to the length of the longest.'
  return list(zip_longest(*seqs, fillvalue=fill))
