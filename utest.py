'''
utest is a tiny unit testing library.

Test files are plain scripts that call the utest functions at module level.
Each failure prints a report to stderr; at exit, if any test failed, the process exits with status 1.
Set the UTEST_SHOW_EXC environment variable to truthful to print unexpected exception tracebacks.

Run as a program to execute a set of test scripts, each in its own interpreter:
  python3 utest.py test/*.py
'''


import atexit as _atexit
import inspect as _inspect
from os import environ as _environ
from os.path import basename as _basename
from sys import stderr as _stderr
from traceback import print_exception as _print_exception


__all__ = [
  'utest',
  'utest_exc',
  'utest_seq',
  'utest_seq_exc',
  'utest_val',
]


_utest_test_count = 0
_utest_failure_count = 0
_show_exc = _environ.get('UTEST_SHOW_EXC', '').lower() not in ('', '0', 'false', 'no')


def utest(exp, fn, *args, _utest_depth=0, **kwargs):
  '''
  Invoke `fn` with `args` and `kwargs`.
  Log a test failure if an exception is raised or the returned value does not equal `exp`.
  '''
  global _utest_test_count
  _utest_test_count += 1
  try: ret = fn(*args, **kwargs)
  except BaseException as exc:
    _utest_failure(_utest_depth, exp_label='value', exp=exp, exc=exc, subj=fn, args=args, kwargs=kwargs)
  else:
    if exp != ret:
      _utest_failure(_utest_depth, exp_label='value', exp=exp, ret_label='value', ret=ret, subj=fn, args=args, kwargs=kwargs)


def utest_exc(exp_exc, fn, *args, _utest_depth=0, **kwargs):
  '''
  Invoke `fn` with `args` and `kwargs`.
  Log a test failure if an exception is not raised or if the raised exception type and args not match `exp_exc`.
  '''
  global _utest_test_count
  _utest_test_count += 1
  try: ret = fn(*args, **kwargs)
  except BaseException as exc:
    if not _compare_exceptions(exp_exc, exc):
      _utest_failure(_utest_depth, exp_label='exception', exp=exp_exc, exc=exc, subj=fn, args=args, kwargs=kwargs)
  else:
    _utest_failure(_utest_depth, exp_label='exception', exp=exp_exc, ret_label='value', ret=ret, subj=fn, args=args, kwargs=kwargs)


def utest_seq(exp_seq, fn, *args, _utest_depth=0, **kwargs):
  '''
  Invoke `fn` with `args` and `kwargs`, and convert the resulting iterable into a sequence.
  Log a test failure if an exception is raised,
  or if any items of the returned seqence do not equal the items of `exp`.
  '''
  global _utest_test_count
  _utest_test_count += 1
  exp = list(exp_seq)
  try:
    ret = list(fn(*args, **kwargs))
  except BaseException as exc:
    _utest_failure(_utest_depth, exp_label='sequence', exp=exp, exc=exc, subj=fn, args=args, kwargs=kwargs)
    return
  if exp != ret:
    _utest_failure(_utest_depth, exp_label='sequence', exp=exp, ret_label='sequence', ret=ret, subj=fn, args=args, kwargs=kwargs)


def utest_seq_exc(exp_exc, fn, *args, _utest_depth=0, **kwargs):
  '''
  Invoke `fn` with `args` and `kwargs`, and convert the resulting iterable into a sequence.
  Log a test failure if an exception is not raised or if the raised exception does not match `exp_exc`.
  '''
  global _utest_test_count
  _utest_test_count += 1
  try:
    ret = list(fn(*args, **kwargs))
  except BaseException as exc:
    if not _compare_exceptions(exp_exc, exc):
      _utest_failure(_utest_depth, exp_label='exception', exp=exp_exc, exc=exc, subj=fn, args=args, kwargs=kwargs)
  else:
    _utest_failure(_utest_depth, exp_label='exception', exp=exp_exc, ret_label='sequence', ret=ret, subj=fn, args=args, kwargs=kwargs)


def utest_val(exp_val, act_val, desc='<value>'):
  '''
  Log a test failure if `exp_val` does not equal `act_val`.
  Describe the test with the optional `desc`.
  '''
  global _utest_test_count
  _utest_test_count += 1
  if exp_val != act_val:
    _utest_failure(depth=0, exp_label='value', exp=exp_val, ret_label='value', ret=act_val, subj=repr(desc))


def _utest_failure(depth, exp_label, exp, ret_label=None, ret=None, exc=None, subj=None, args=(), kwargs={}):
  global _utest_failure_count
  assert subj is not None
  _utest_failure_count += 1
  frame = _inspect.stack()[2 + depth].frame # Caller of caller.
  info = _inspect.getframeinfo(frame)
  try: name = subj.__qualname__
  except AttributeError: name = str(subj)
  _errL(f'{_basename(info.filename)}:{info.lineno}: utest failure: {name}')
  for i, el in enumerate(args):
    _errL(f'  arg {i} = {el!r}')
  for name, val in kwargs.items():
    _errL(f'  arg {name} = {val!r}')
  _errL(f'  expected {exp_label}: {exp!r}')
  if ret_label: # Unexpected value.
    _errL(f'  returned {ret_label}: {ret!r}')
  if exc is not None: # Unexpected exception.
    _errL(f'  raised exception:   {exc!r}')
    for i, arg in enumerate(exc.args):
      _errL(f'    exc arg {i}: {arg!r}')
    if _show_exc: _print_exception(exc, file=_stderr)
  _errL()


def _compare_exceptions(exp, act):
  '''
  Compare two exceptions for approximate value equality.
  Since Python exceptions do not implement value equality, we offer several methods of comparison:
  * if `exp` is a string, then compare it to the repr of `act`.
  * if `exp` is a type, then test if `act` is an instance of `exp`.
  * otherwise, compare the types and args of `act` (which must be an exception instance) to `exp`.
  '''
  if isinstance(exp, str): return exp == repr(act)
  if isinstance(exp, type): return isinstance(act, exp)
  return type(exp) == type(act) and exp.args == act.args


def _errL(*items): print(*items, sep='', file=_stderr)


@_atexit.register
def report():
  'At process exit, if any test failures occured, print a summary message and force process to exit with status code 1.'
  from os import _exit
  if _utest_failure_count > 0:
    _errL(f'\nutest ran: {_utest_test_count}; failed: {_utest_failure_count}')
    _stderr.flush()
    _exit(1) # Raising SystemExit has no effect in an atexit handler.


def main():
  'Run each test script named on the command line in a separate interpreter, and summarize.'
  from os import pathsep
  from os.path import abspath, dirname
  from subprocess import run
  from sys import argv, executable, exit
  paths = argv[1:]
  if not paths: exit('usage: utest.py TEST_SCRIPT...')
  # Scripts import utest and the package under test from this directory, not their own.
  root = dirname(abspath(__file__))
  prev = _environ.get('PYTHONPATH')
  env = {**_environ, 'PYTHONPATH': root + pathsep + prev if prev else root}
  failed = []
  for path in paths:
    code = run([executable, path], env=env).returncode
    if code: failed.append(path)
    _errL(f'{"FAIL" if code else "ok  "} {path}')
  _errL(f'\nutest scripts: {len(paths)}; failed: {len(failed)}')
  exit(1 if failed else 0)


if __name__ == '__main__': main()
