#!/usr/bin/env python3
"""
simulator.py — Command parser and terminal front-end for computer.py.

Reads one line at a time. Each line is classified, first match wins:

  exit()                     end the session, forget everything
  # comment / blank          ignored
  end                        close the open function definition
  <anything>                 captured verbatim while a definition is open
  x = 5                      assign an integer variable
  def f                      open a function definition (replaces any old one)
  f  or  f()                 replay the function body

Inside a function body only two kinds of line do anything:

  c = Computer.new(100)
  c.set_address(0).insert("PUSH", x).insert("PRINT").insert("STOP").execute()

Engine errors are reported through the output and never stop the session.
"""

import logging
import re
import sys
from typing import Optional

from computer import Computer, ComputerError, Errors, Output, ScreenOutput
from logging_config import setup_logging

logger = logging.getLogger(__name__)

INPUT_FILE_NAME     = 'Input.txt'
FUNCTION_END_MARKER = 'END'

IDENT = r'[a-zA-Z_][a-zA-Z0-9_]*'


class Messages:
    ReadingInput            = 'Reading input...'
    SessionEnded            = 'Session ended.'
    MenuPrompt              = ('Choose an option:\n'
                               '  1. Enter commands manually\n'
                               '  2. Read commands from ' + INPUT_FILE_NAME)
    ManualInputInstruction  = 'Enter commands line by line. Type exit() to end the session.'
    ReadFromFileInstruction = 'Finished reading input. Continue typing commands, or exit() to end the session.'


class Patterns:
    Exit               = re.compile(r'^\s*exit\(\)\s*$')
    Assignment         = re.compile(rf'^\s*({IDENT})\s*=\s*([0-9]+)\s*$')
    FunctionDefinition = re.compile(rf'^\s*def\s+({IDENT})\s*$')
    FunctionEnd        = re.compile(r'^\s*end\s*(#.*)?$')
    ComputerInit       = re.compile(rf'^\s*({IDENT})\s*=\s*Computer\.new\(\s*([0-9]+)\s*\)\s*$')

    SetAddress = re.compile(r'^set_address\(\s*(-?\w+)\s*\)$')
    Insert     = re.compile(r'^insert\(\s*"([a-zA-Z_]+)"\s*(?:,\s*(-?\w+)\s*)?\)$')
    Execute    = re.compile(r'^execute\(\s*\)$')


# ── Parser ────────────────────────────────────────────────────────────────────

class Parser:
    def __init__(self, outs=None):
        self.outs = outs if outs is not None else Output()
        self.reset()

    def reset(self):
        """Forget variables, the function definition, and the computer."""
        self.storage: dict = {}
        self.function: list = []
        self.function_name: Optional[str] = None
        self.computer: Optional[Computer] = None
        self.computer_name: Optional[str] = None
        self.entry_address = 0

    # ── Output sink for the computer ──────────────────────────────────────────

    def send(self, message: str):
        self.outs.send(message)

    def end_session(self):
        self.outs.end_session()

    # ── Input ─────────────────────────────────────────────────────────────────

    def read_line(self, line: str):
        self._parse(line)

    def read_from_file(self, path=INPUT_FILE_NAME):
        self.send(Messages.ReadingInput)
        try:
            with open(path, encoding='utf-8') as f:
                data = f.read()
        except OSError as e:
            logger.error('cannot read %s: %s', path, e)
            self.send(Errors.FileNotReadable)
            return

        for line in data.split('\n'):
            self.send(f'> {line}')
            self._parse(line)

    # ── Classification ────────────────────────────────────────────────────────

    def _parse(self, line: str):
        if Patterns.Exit.match(line):
            self.send(Messages.SessionEnded)
            self.reset()
            logger.info('session ended')
            self.end_session()
            return

        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            return

        if self._capturing():
            if Patterns.FunctionEnd.match(line):
                self.function.append(FUNCTION_END_MARKER)
            else:
                self.function.append(line)
            return

        m = Patterns.Assignment.match(line)
        if m:
            self.storage[m.group(1)] = int(m.group(2))
            return

        m = Patterns.FunctionDefinition.match(line)
        if m:
            self.function_name = m.group(1)
            self.function = []
            logger.info('defining function %s', self.function_name)
            return

        if self._is_function_call(line):
            self._call_function()
            return

        logger.debug('ignored line: %r', line)

    def _capturing(self) -> bool:
        return (self.function_name is not None
                and (not self.function or self.function[-1] != FUNCTION_END_MARKER))

    def _is_function_call(self, line: str) -> bool:
        if self.function_name is None:
            return False
        pattern = rf'^[ \t]*{re.escape(self.function_name)}(\(\))?[ \t]*$'
        return re.match(pattern, line) is not None

    # ── Function replay ───────────────────────────────────────────────────────

    def _call_function(self):
        for line in self.function:
            if line == FUNCTION_END_MARKER:
                break

            m = Patterns.ComputerInit.match(line)
            if m:
                self._init_computer(m.group(1), int(m.group(2)))
                continue

            if self.computer_name is None:
                continue
            prefix = self.computer_name + '.'
            body = line.strip()
            if body.startswith(prefix):
                for command in body[len(prefix):].split('.'):
                    self._process_command(command.strip())

    def _init_computer(self, name: str, size: int):
        self.computer_name = name
        self.computer = Computer.new(size, outs=self)
        self.entry_address = 0
        logger.info('created computer %s with stack size %d', name, self.computer.size)

    def _resolve(self, token: str) -> Optional[int]:
        try:
            return int(token)
        except ValueError:
            pass
        if token in self.storage:
            return self.storage[token]
        logger.debug('unresolved argument %r, skipping', token)
        return None

    def _process_command(self, command: str):
        if self.computer is None:
            return
        try:
            m = Patterns.SetAddress.match(command)
            if m:
                address = self._resolve(m.group(1))
                if address is not None:
                    self.entry_address = self.computer.set_address(address)
                return

            m = Patterns.Insert.match(command)
            if m:
                instruction, token = m.group(1), m.group(2)
                if token is None:
                    self.computer.insert(instruction)
                    return
                argument = self._resolve(token)
                if argument is not None:
                    self.computer.insert(instruction, argument)
                return

            if Patterns.Execute.match(command):
                # Runs from the last address set, not from where the inserts left the PC
                self.computer.set_address(self.entry_address)
                self.computer.execute()
                return

            logger.debug('unknown command: %r', command)
        except ComputerError as e:
            self.send(str(e))


# ── Tests ─────────────────────────────────────────────────────────────────────

def run_tests():
    cases = [
        # Print a variable
        ('x = 5\ndef f\nc = Computer.new(10)\n'
         'c.set_address(0).insert("PUSH", x).insert("PRINT").insert("STOP").execute()\n'
         'end\nf',
         ['5']),

        # Call form with parentheses
        ('def f\nc = Computer.new(10)\n'
         'c.insert("PUSH", 7).insert("PRINT").insert("STOP").set_address(0).execute()\n'
         'end\nf()',
         ['7']),

        # Multiply
        ('a = 6\nb = 2\ndef f\nc = Computer.new(10)\n'
         'c.insert("PUSH", a).insert("PUSH", b).insert("MULT").insert("PRINT")\n'
         'c.insert("STOP").set_address(0).execute()\n'
         'end\nf',
         ['12']),

        # Call and return
        ('def f\nc = Computer.new(10)\n'
         'c.insert("PUSH", 3).insert("CALL", 6).insert("STOP")\n'
         'c.set_address(3).insert("PUSH", 9).insert("PRINT").insert("STOP")\n'
         'c.set_address(6).insert("RET")\n'
         'c.set_address(0).execute()\n'
         'end\nf',
         ['9']),

        # Errors are reported, the session continues
        ('def f\nc = Computer.new(10)\n'
         'c.set_address(10)\n'
         'c.insert("JUMP")\n'
         'c.insert("PUSH")\n'
         'c.set_address(5).execute()\n'
         'c.set_address(0).insert("PRINT").insert("STOP").set_address(0).execute()\n'
         'end\nf',
         [Errors.PcOutOfBounds, Errors.InvalidInstruction, Errors.InvalidArgument,
          Errors.NoInstructionAtAddress, Errors.InvalidArgumentPrint]),

        # Unknown variables are skipped silently
        ('def f\nc = Computer.new(10)\n'
         'c.insert("PUSH", nope).insert("STOP").set_address(0).execute()\n'
         'end\nf',
         []),

        # Only the latest definition is callable
        ('def f\nc = Computer.new(5)\nc.insert("PUSH", 1).insert("PRINT").set_address(0).execute()\nend\n'
         'def g\nc = Computer.new(5)\nc.insert("PUSH", 2).insert("PRINT").set_address(0).execute()\nend\n'
         'f\ng',
         ['2']),

        # exit() forgets the session
        ('x = 4\ndef f\nc = Computer.new(5)\nc.insert("PUSH", x).insert("PRINT").execute()\nend\n'
         'exit()\nf',
         [Messages.SessionEnded]),
    ]

    passed = 0
    failures = []

    for src, expected in cases:
        outs = Output()
        p = Parser(outs=outs)
        for line in src.split('\n'):
            p.read_line(line)
        if outs.get() == expected:
            passed += 1
        else:
            failures.append((src.split('\n')[0][:60], expected, outs.get()))

    print(f'Tests: {passed}/{len(cases)} passed')
    for src, exp, got in failures:
        print(f'  FAIL: {src}')
        print(f'    exp: {exp}')
        print(f'    got: {got}')
    return passed, len(cases)


# ── Interactive REPL ──────────────────────────────────────────────────────────

def repl(path=INPUT_FILE_NAME):
    outs = ScreenOutput()
    p = Parser(outs=outs)
    print('Computer Simulator')
    while True:
        try:
            print(Messages.MenuPrompt)
            choice = input('> ').strip()
            outs.ended = False
            if choice == '1':
                print(Messages.ManualInputInstruction)
            elif choice == '2':
                p.read_from_file(path)
                if outs.ended:
                    continue
                print(Messages.ReadFromFileInstruction)
            else:
                print(Errors.InvalidInput)
                continue

            while not outs.ended:
                p.read_line(input('>> '))
        except EOFError:
            break
        except KeyboardInterrupt:
            print('\nInterrupted, session state preserved')


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    setup_logging(logging.DEBUG if '--debug' in argv else logging.WARNING)

    if '--test' in argv:
        p, t = run_tests()
        return 0 if p == t else 1

    if '--file' in argv:
        i = argv.index('--file')
        if i + 1 >= len(argv):
            print('--file needs a path', file=sys.stderr)
            return 2
        Parser(outs=ScreenOutput()).read_from_file(argv[i + 1])
        return 0

    repl()
    return 0


if __name__ == '__main__':
    sys.exit(main())
