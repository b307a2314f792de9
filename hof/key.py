# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Canonical argument keys for memoization.

`arg_key(args, kwargs)` encodes a call's arguments as a deterministic string.
Structurally equal arguments produce equal keys; arguments that differ in value, type or order produce different keys.
Mappings and sets are encoded independently of their iteration order.

Each value is encoded with a short type tag:
  `N` None; `T`/`F` bools; `i` int; `f` float; `c` complex; `s` str; `y` bytes;
  `[...]` list; `(...)` tuple; `{...}` dict; `S{...}` set; `Z{...}` frozenset;
  `E<type>name` enum members; `D<type>{...}` dataclasses.
Subclasses of the builtin types are prefixed with their qualified type name, e.g. `<mod.Point>(i1,i2)`.
A type name is only used when it resolves back to that same type by import;
classes created inside functions, or several namedtuples of one name in a module, have no such name.

Values with no stable canonical form raise SerializationError: cyclic structures, functions, classes and other callables,
and objects of any type that is not registered with `encode_key`.
Register additional types with `@encode_key.register`; the implementation receives the value and an `Encoder`.
'''

from dataclasses import fields, is_dataclass
from enum import Enum
from functools import singledispatch
from sys import modules
from typing import Any, Callable, Iterable, Mapping

from .exceptions import SerializationError


__all__ = ['Encoder', 'arg_key', 'encode_key', 'encode_value']


class Encoder:
  '''
  The state of a single key encoding: the path to the current value (for error messages),
  and the ids of the containers currently being encoded (for cycle detection).
  '''

  def __init__(self) -> None:
    self.path:list[str] = []
    self.active_ids:set[int] = set()


  def error(self, msg:str, obj:Any) -> SerializationError:
    return SerializationError(msg, path=''.join(self.path), obj=obj)


  def encode(self, obj:Any, step:str) -> str:
    'Encode `obj`, located at `step` relative to the current path.'
    self.path.append(step)
    try: return encode_value(obj, self)
    finally: self.path.pop()


  def container(self, obj:Any, opener:str, closer:str, parts:Callable[[],Iterable[str]]) -> str:
    'Encode a container, detecting cycles by identity.'
    i = id(obj)
    if i in self.active_ids: raise self.error(f'cyclic reference to {type(obj).__name__}', obj)
    self.active_ids.add(i)
    try: body = ','.join(parts())
    finally: self.active_ids.discard(i)
    return f'{type_prefix(obj, self)}{opener}{body}{closer}'


def arg_key(args:tuple, kwargs:Mapping[str,Any]|None=None) -> str:
  '''
  Return the canonical key for positional `args` and keyword `kwargs`.
  Keyword arguments are ordered by name.
  '''
  enc = Encoder()
  parts = [enc.encode(a, f'args[{i}]') for i, a in enumerate(args)]
  if kwargs:
    parts.append(';')
    parts.extend(f'{k}={enc.encode(kwargs[k], k)}' for k in sorted(kwargs))
  return ','.join(parts)


def encode_value(obj:Any, enc:Encoder) -> str:
  # Enum and dataclass checks precede dispatch, so that e.g. IntEnum members do not dispatch as int.
  if isinstance(obj, Enum): return f'E<{qual_name(type(obj), enc)}>{obj.name}'
  if is_dataclass(obj): return _encode_dataclass(obj, enc)
  return encode_key(obj, enc)


@singledispatch
def encode_key(obj:Any, enc:Encoder) -> str:
  if callable(obj): raise enc.error(f'callable value has no canonical form: {obj!r}', obj)
  raise enc.error(f'value of type {type_name(type(obj))} has no canonical form; register one with `encode_key.register`', obj)


@encode_key.register
def _(obj:None, enc:Encoder) -> str: return 'N'

@encode_key.register
def _(obj:bool, enc:Encoder) -> str: return type_prefix(obj, enc) + ('T' if obj else 'F')

@encode_key.register
def _(obj:int, enc:Encoder) -> str: return f'{type_prefix(obj, enc)}i{int(obj)}'

@encode_key.register
def _(obj:float, enc:Encoder) -> str: return f'{type_prefix(obj, enc)}f{float(obj)!r}'

@encode_key.register
def _(obj:complex, enc:Encoder) -> str: return f'{type_prefix(obj, enc)}c{complex(obj)!r}'

@encode_key.register
def _(obj:str, enc:Encoder) -> str: return f'{type_prefix(obj, enc)}s{str(obj)!r}'

@encode_key.register
def _(obj:bytes, enc:Encoder) -> str: return f'{type_prefix(obj, enc)}y{bytes(obj)!r}'


@encode_key.register
def _(obj:list, enc:Encoder) -> str:
  return enc.container(obj, '[', ']', lambda: (enc.encode(el, f'[{i}]') for i, el in enumerate(obj)))


@encode_key.register
def _(obj:tuple, enc:Encoder) -> str:
  return enc.container(obj, '(', ')', lambda: (enc.encode(el, f'[{i}]') for i, el in enumerate(obj)))


@encode_key.register
def _(obj:dict, enc:Encoder) -> str:
  def parts() -> list[str]:
    items = [(enc.encode(k, f'<key {k!r}>'), enc.encode(v, f'[{k!r}]')) for k, v in obj.items()]
    return [f'{k}:{v}' for k, v in sorted(items)]
  return enc.container(obj, '{', '}', parts)


@encode_key.register
def _(obj:set, enc:Encoder) -> str:
  return enc.container(obj, 'S{', '}', lambda: sorted(enc.encode(el, '<element>') for el in obj))


@encode_key.register
def _(obj:frozenset, enc:Encoder) -> str:
  return enc.container(obj, 'Z{', '}', lambda: sorted(enc.encode(el, '<element>') for el in obj))


def _encode_dataclass(obj:Any, enc:Encoder) -> str:
  if callable(obj): raise enc.error(f'callable value has no canonical form: {obj!r}', obj)
  t = type(obj)
  i = id(obj)
  if i in enc.active_ids: raise enc.error(f'cyclic reference to {t.__name__}', obj)
  enc.active_ids.add(i)
  try: body = ','.join(f'{f.name}={enc.encode(getattr(obj, f.name), "." + f.name)}' for f in fields(obj))
  finally: enc.active_ids.discard(i)
  return f'D<{qual_name(t, enc)}>{{{body}}}'


_builtin_types = frozenset((bool, int, float, complex, str, bytes, list, tuple, dict, set, frozenset))

def type_prefix(obj:Any, enc:Encoder) -> str:
  'Empty for the exact builtin types; otherwise the qualified type name in angle brackets.'
  t = type(obj)
  return '' if t in _builtin_types else f'<{qual_name(t, enc)}>'


def type_name(t:type) -> str:
  return f'{t.__module__}.{t.__qualname__}'


def qual_name(t:type, enc:Encoder) -> str:
  '''
  Return the qualified name of `t`, which must be importable by that name.
  Otherwise distinct types could share a name and therefore a key.
  '''
  obj:Any = modules.get(t.__module__)
  for part in t.__qualname__.split('.'):
    obj = getattr(obj, part, None)
  if obj is not t: raise enc.error(f'type has no importable name: {type_name(t)}', t)
  return type_name(t)
