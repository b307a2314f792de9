# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Exception classes.
'''

from typing import Any


__all__ = ['SerializationError']


class SerializationError(ValueError):
  '''
  Raised when a value has no stable canonical serialization, and so cannot be used to derive a memoization key.
  `path` locates the offending value within the call arguments, e.g. "args[0]['a'][1]".
  '''
  def __init__(self, msg:str, *, path:str, obj:Any) -> None:
    self.path = path
    self.obj = obj
    super().__init__(f'{path}: {msg}')
