# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Timer schedulers for the call gates.
A scheduler arms fire-once, cancelable timers: `sched.call_later(delay, callback)` returns a handle with a `cancel()` method.
'''

from asyncio import AbstractEventLoop, get_running_loop
from heapq import heappop, heappush
from threading import Lock, Timer
from typing import Callable, Protocol

from . import config as _config


__all__ = ['Cancelable', 'LoopSched', 'ManualSched', 'ManualTimer', 'Sched', 'ThreadSched', 'check_interval', 'current_sched', 'set_default_sched']


Callback = Callable[[],None]


class Cancelable(Protocol):
  def cancel(self) -> None: ...


class Sched(Protocol):
  def call_later(self, delay:float, callback:Callback) -> Cancelable: ...


def check_interval(name:str, interval:float) -> float:
  if isinstance(interval, bool) or not isinstance(interval, (int, float)):
    raise TypeError(f'{name} must be a number of seconds; received: {interval!r}')
  if interval < 0: raise ValueError(f'{name} must be nonnegative; received: {interval!r}')
  return float(interval)


class ManualTimer:
  'A timer armed on a ManualSched.'

  def __init__(self, when:float, seq:int, callback:Callback) -> None:
    self.when = when
    self.seq = seq
    self.callback = callback
    self.cancelled = False

  def __lt__(self, other:'ManualTimer') -> bool:
    return (self.when, self.seq) < (other.when, other.seq)

  def __repr__(self) -> str:
    return f'<ManualTimer when={self.when} seq={self.seq}{" cancelled" if self.cancelled else ""}>'

  def cancel(self) -> None:
    self.cancelled = True


class ManualSched:
  '''
  A scheduler with a virtual clock, for hosts that drive time themselves and for deterministic tests.
  Timers fire only from within `advance` or `run_pending`, in order of due time and then arming order.
  A timer armed with zero delay fires at the next of these calls, never synchronously.
  An exception raised by a callback propagates out of `advance`; the remaining timers stay armed.
  '''

  def __init__(self, now:float=0.0) -> None:
    self.now = float(now)
    self._heap:list[ManualTimer] = []
    self._seq = 0


  def __repr__(self) -> str: return f'<ManualSched now={self.now} armed={self.armed}>'


  @property
  def armed(self) -> int:
    'The number of timers that are armed and not cancelled.'
    return sum(1 for t in self._heap if not t.cancelled)


  def call_later(self, delay:float, callback:Callback) -> ManualTimer:
    delay = check_interval('delay', delay)
    timer = ManualTimer(self.now + delay, self._seq, callback)
    self._seq += 1
    heappush(self._heap, timer)
    return timer


  def advance(self, seconds:float) -> int:
    '''
    Move the clock forward by `seconds`, firing every timer that falls due, including timers armed by callbacks along the way.
    Returns the number of callbacks fired.
    '''
    end = self.now + check_interval('seconds', seconds)
    fired = 0
    heap = self._heap
    while heap and heap[0].when <= end:
      timer = heappop(heap)
      if timer.cancelled: continue
      self.now = max(self.now, timer.when)
      fired += 1
      timer.callback()
    self.now = end
    return fired


  def run_pending(self) -> int:
    'Fire the timers that are due now without moving the clock.'
    return self.advance(0)


class ThreadSched:
  'A scheduler that arms a daemon `threading.Timer` for each callback.'

  def call_later(self, delay:float, callback:Callback) -> Timer:
    timer = Timer(check_interval('delay', delay), callback)
    timer.daemon = True
    timer.start()
    return timer


class LoopSched:
  'A scheduler that arms timers on an asyncio event loop. Not threadsafe, as with the loop itself.'

  def __init__(self, loop:AbstractEventLoop) -> None:
    self.loop = loop

  def call_later(self, delay:float, callback:Callback) -> Cancelable:
    return self.loop.call_later(check_interval('delay', delay), callback)


_default_sched:Sched|None = None
_process_sched:Sched|None = None
_process_sched_lock = Lock()


def set_default_sched(sched:Sched|None) -> None:
  'Override the scheduler used by gates that were created without one. Pass None to restore the default behavior.'
  global _default_sched
  _default_sched = sched


def current_sched() -> Sched:
  '''
  Return the scheduler for a gate that was created without one:
  the override set with `set_default_sched` if any;
  otherwise the running asyncio loop;
  otherwise the process-wide scheduler selected by HOF_SCHED.
  '''
  if _default_sched is not None: return _default_sched
  try: loop = get_running_loop()
  except RuntimeError: pass
  else: return LoopSched(loop)
  return process_sched()


def process_sched() -> Sched:
  global _process_sched
  with _process_sched_lock:
    if _process_sched is None:
      _process_sched = ManualSched() if _config.config.sched == 'manual' else ThreadSched()
    return _process_sched
