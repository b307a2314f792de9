# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Call gates: wrappers that use a timer to govern when, or whether, the wrapped function runs.
* `debounce` defers the call until a quiet period of `delay` seconds passes with no further calls.
* `throttle` runs the first call of each `limit` second window immediately and drops the rest (leading edge only).

Each wrapper owns its own timer state and lock; the lock is never held while the wrapped function runs.
When a gate is accessed as a class attribute, the instance is forwarded verbatim as the first positional argument.
Note that the gate state is then shared by all instances, as it belongs to the function.
'''

from enum import Enum
from functools import update_wrapper
from threading import Lock
from types import MethodType
from typing import Any, Callable, final

from .sched import Cancelable, check_interval, current_sched, Sched
from .trace import fn_name, trace


__all__ = ['Debounced', 'Suppressed', 'Throttled', 'debounce', 'throttle']


@final
class Suppressed(Enum):
  '''
  Singleton class and value returned by a throttled function when the call is dropped.
  Test for it with `res is Suppressed._`.
  '''
  _ = 0


class _Gate:

  kind = ''

  def __init__(self, fn:Callable, interval:float, sched:Sched|None) -> None:
    if not callable(fn): raise TypeError(f'{self.kind}: fn must be callable; received: {fn!r}')
    self.fn = fn
    self.sched = sched
    self._lock = Lock()
    self._timer:Cancelable|None = None
    update_wrapper(self, fn, updated=()) # Copy the name and doc, but not the attributes of another wrapper.


  def __get__(self, obj:Any, cls:type|None=None) -> Callable:
    if obj is None: return self
    return MethodType(self, obj)


  def _arm(self, interval:float, callback:Callable[[],None]) -> Cancelable:
    sched = self.sched or current_sched()
    return sched.call_later(interval, callback)


class Debounced(_Gate):
  '''
  Debounced function wrapper.
  Every call cancels the pending invocation, if any, and arms a new one with the latest arguments.
  The wrapped function runs once `delay` seconds pass without another call.
  Calls return None; the result of the wrapped function is not observable.
  Exceptions raised by the wrapped function surface through the scheduler at firing time.
  '''

  kind = 'debounce'

  def __init__(self, fn:Callable, delay:float, sched:Sched|None=None) -> None:
    super().__init__(fn, check_interval('delay', delay), sched)
    self.delay = float(delay)


  def __repr__(self) -> str: return f'<Debounced({self.delay}) {fn_name(self.fn)}>'


  @property
  def pending(self) -> bool:
    'True if an invocation is armed and has not yet fired.'
    return self._timer is not None


  def __call__(self, *args:Any, **kwargs:Any) -> None:
    slot = _Slot()

    def fire() -> None:
      with self._lock:
        if self._timer is not slot: return # Superseded after the timer began to fire.
        self._timer = None
      trace(gate=self.kind, fn=fn_name(self.fn), event='fire')
      self.fn(*args, **kwargs)

    with self._lock:
      prev = self._timer
      self._timer = None
      if prev is not None: prev.cancel()
      slot.target = self._arm(self.delay, fire)
      self._timer = slot
    if prev is not None: trace(gate=self.kind, fn=fn_name(self.fn), event='cancel')
    trace(gate=self.kind, fn=fn_name(self.fn), event='arm', delay=self.delay)


  def cancel(self) -> bool:
    'Discard the pending invocation. Returns True if there was one.'
    with self._lock:
      timer = self._timer
      self._timer = None
    if timer is None: return False
    timer.cancel()
    trace(gate=self.kind, fn=fn_name(self.fn), event='cancel')
    return True


class _Slot:
  '''
  Identity token for one armed debounce invocation, wrapping the scheduler handle.
  A thread timer can begin firing before `call_later` returns, so `fire` compares tokens under the lock.
  '''
  target:Cancelable|None = None

  def cancel(self) -> None:
    if self.target is not None: self.target.cancel()


class Throttled(_Gate):
  '''
  Throttled function wrapper (leading edge only).
  While the gate is closed, a call opens it, arms a timer to close it after `limit` seconds,
  and then runs the wrapped function immediately, returning its result.
  While the gate is open, calls are dropped and return `Suppressed._`; nothing is queued and no trailing call is made.
  If the wrapped function raises, the exception propagates but the window still runs to completion.
  '''

  kind = 'throttle'

  def __init__(self, fn:Callable, limit:float, sched:Sched|None=None) -> None:
    super().__init__(fn, check_interval('limit', limit), sched)
    self.limit = float(limit)
    self.is_open = False


  def __repr__(self) -> str: return f'<Throttled({self.limit}) {fn_name(self.fn)}>'


  def __call__(self, *args:Any, **kwargs:Any) -> Any:
    with self._lock:
      if self.is_open:
        dropped = True
      else:
        dropped = False
        self._timer = self._arm(self.limit, self._reopen)
        self.is_open = True
    if dropped:
      trace(gate=self.kind, fn=fn_name(self.fn), event='drop')
      return Suppressed._
    trace(gate=self.kind, fn=fn_name(self.fn), event='call', limit=self.limit)
    return self.fn(*args, **kwargs)


  def _reopen(self) -> None:
    with self._lock:
      self.is_open = False
      self._timer = None
    trace(gate=self.kind, fn=fn_name(self.fn), event='reopen')


def debounce(delay:float, sched:Sched|None=None) -> Callable[[Callable],Debounced]:
  '''
  Decorator: `@debounce(0.5)`.
  Equivalent to `Debounced(fn, delay, sched)`.
  '''
  check_interval('delay', delay)
  def _debounce(fn:Callable) -> Debounced: return Debounced(fn, delay, sched)
  return _debounce


def throttle(limit:float, sched:Sched|None=None) -> Callable[[Callable],Throttled]:
  '''
  Decorator: `@throttle(2)`.
  Equivalent to `Throttled(fn, limit, sched)`.
  '''
  check_interval('limit', limit)
  def _throttle(fn:Callable) -> Throttled: return Throttled(fn, limit, sched)
  return _throttle
