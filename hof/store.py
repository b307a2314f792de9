# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from collections import OrderedDict
from typing import Any, Hashable


__all__ = ['LRUStore']


class LRUStore(OrderedDict):
  '''
  A bounded memoization store that evicts the least recently used entry once `maxsize` is exceeded.
  Any MutableMapping can serve as a store; this one is provided because the default `dict` store grows without bound.
  '''

  def __init__(self, maxsize:int) -> None:
    if isinstance(maxsize, bool) or not isinstance(maxsize, int): raise TypeError(f'maxsize must be an int; received: {maxsize!r}')
    if maxsize < 1: raise ValueError(f'maxsize must be positive; received: {maxsize!r}')
    super().__init__()
    self.maxsize = maxsize
    self.evictions = 0


  def __repr__(self) -> str: return f'<LRUStore maxsize={self.maxsize} len={len(self)}>'


  def __getitem__(self, key:Hashable) -> Any:
    val = super().__getitem__(key)
    self.move_to_end(key)
    return val


  def __setitem__(self, key:Hashable, val:Any) -> None:
    super().__setitem__(key, val)
    self.move_to_end(key)
    while len(self) > self.maxsize:
      self.popitem(last=False)
      self.evictions += 1
