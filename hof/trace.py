# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Diagnostic trace lines, written to stderr in logfmt when HOF_TRACE is enabled.
Format: `hof: gate=debounce fn=save event=arm delay=0.5`.
'''

from sys import stderr
from typing import Any, Callable, TextIO

from . import config as _config


def trace_enabled() -> bool: return _config.config.trace


def trace(file:TextIO|None=None, **fields:Any) -> None:
  'Write a trace line if tracing is enabled.'
  if not trace_enabled(): return
  print('hof:', fmt_fields(fields), file=(file or stderr), flush=True)


def fmt_fields(fields:dict[str,Any]) -> str:
  return ' '.join(f'{k}={fmt_val(v)}' for k, v in fields.items())


def fmt_val(val:Any) -> str:
  if val is None: return ''
  if val is True: return 'true'
  if val is False: return 'false'
  s = str(val).replace('"', '\\"').replace('\n', '\\n')
  if s == '': return '""'
  if ' ' in s or '=' in s: s = f'"{s}"'
  return s


def fn_name(fn:Callable) -> str:
  'A short name for a wrapped callable, for trace output.'
  return getattr(fn, '__qualname__', None) or getattr(fn, '__name__', None) or type(fn).__name__
