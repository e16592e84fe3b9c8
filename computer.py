#!/usr/bin/env python3
"""
computer.py — A toy stack computer.

A fixed-size cell store, a program counter, and six instructions.

Architecture:
  - Stack: `size` addressable slots, each empty (None) or holding a Cell,
    plus a tail that only grows by push and shrinks by pop
  - Computer: owns one Stack and the program counter; `insert` lays a
    program out cell by cell, `execute` runs it until STOP
  - Pushed data lives on the tail as bare cells (opcode None), so an
    instruction's argument slot is never mistaken for a value

Instruction set:
  ('MULT',  None)  pop two values, push their product
  ('CALL',  addr)  jump to absolute addr
  ('RET',   None)  pop a value, jump to it
  ('STOP',  None)  end the run
  ('PRINT', None)  pop a value, send it to output
  ('PUSH',  n)     push integer n
"""

import logging
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

DEFAULT_STACK_SIZE = 100

NO_ARGUMENT   = ('MULT', 'RET', 'STOP', 'PRINT')
WITH_ARGUMENT = ('CALL', 'PUSH')
INSTRUCTIONS  = NO_ARGUMENT + WITH_ARGUMENT


# ── Errors ────────────────────────────────────────────────────────────────────

class Errors:
    PcOutOfBounds             = 'Error: address is out of bounds.'
    NoInstructionAtAddress    = 'Error: no instruction at the current address.'
    InvalidArgument           = 'Error: instruction requires an argument.'
    InvalidInstruction        = 'Error: invalid instruction.'
    InvalidInput              = 'Error: invalid input.'
    InvalidArgumentMult       = 'Error: MULT requires two pushed values.'
    InvalidArgumentCall       = 'Error: CALL address is invalid.'
    InvalidArgumentRetInt     = 'Error: RET requires a pushed address.'
    InvalidArgumentRetAddress = 'Error: RET address is out of bounds.'
    InvalidArgumentPrint      = 'Error: PRINT requires a pushed value.'
    FileNotReadable           = 'Error: input file could not be read.'


class ComputerError(Exception):
    message = Errors.InvalidInput

    def __init__(self, message=None):
        super().__init__(message or self.message)


class AddressOutOfBounds(ComputerError):
    message = Errors.PcOutOfBounds

class ProgramCounterOutOfBounds(ComputerError):
    message = Errors.PcOutOfBounds

class MissingArgument(ComputerError):
    message = Errors.InvalidArgument

class InvalidInstruction(ComputerError):
    message = Errors.InvalidInstruction

class NoInstructionAtAddress(ComputerError):
    message = Errors.NoInstructionAtAddress

class InvalidMultiplicationOperands(ComputerError):
    message = Errors.InvalidArgumentMult

class MissingCallArgument(ComputerError):
    message = Errors.InvalidArgumentCall

class InvalidCallAddress(ComputerError):
    message = Errors.InvalidArgumentCall

class InvalidReturnValue(ComputerError):
    message = Errors.InvalidArgumentRetInt

class InvalidReturnAddress(ComputerError):
    message = Errors.InvalidArgumentRetAddress

class InvalidPrintOperand(ComputerError):
    message = Errors.InvalidArgumentPrint


# ── Output ────────────────────────────────────────────────────────────────────

class Output:
    """Collects everything sent to it; used by the tests."""
    def __init__(self):
        self.messages: list = []
        self.ended = False

    def send(self, message: str):
        self.messages.append(message)

    def end_session(self):
        self.ended = True

    def get(self) -> list:
        return self.messages

    def clear(self):
        self.messages = []
        self.ended = False


class ScreenOutput(Output):
    """Prints each message on stdout as it arrives"""
    def send(self, message: str):
        print(message, flush=True)


# ── Stack ─────────────────────────────────────────────────────────────────────

class Cell(NamedTuple):
    opcode:   Optional[str]
    argument: Optional[int]


class Stack:
    def __init__(self, size: int):
        if size < 1:
            size = DEFAULT_STACK_SIZE
        self.size = size
        self._cells: list = [None] * size

    def __len__(self):
        return len(self._cells)

    def push(self, cell: Cell):
        self._cells.append(cell)

    def pop(self) -> Optional[Cell]:
        """
        Remove and return the latest pushed cell.

        Returns None when only the addressed region is left; the slots
        below `size` are never removed.
        """
        if len(self._cells) <= self.size:
            return None
        return self._cells.pop()

    def insert(self, cell: Cell, index: int):
        if index < 0 or index >= len(self._cells):
            raise AddressOutOfBounds()
        self._cells[index] = cell

    def peek(self, index: int) -> Optional[Cell]:
        # Reads out of bounds are not an error
        if index < 0 or index >= len(self._cells):
            return None
        return self._cells[index]


# ── Computer ──────────────────────────────────────────────────────────────────

class Computer:
    def __init__(self, stack: Stack, program_counter: int = 0, outs=None):
        self.stack = stack
        self._pc   = program_counter
        self.outs  = outs

    @classmethod
    def new(cls, size: int, outs=None) -> 'Computer':
        return cls(Stack(size), 0, outs)

    @property
    def program_counter(self) -> int:
        return self._pc

    @property
    def size(self) -> int:
        return self.stack.size

    def _emit(self, s):
        if self.outs is not None:
            self.outs.send(str(s))

    # ── Public ────────────────────────────────────────────────────────────────

    def set_address(self, address: int) -> int:
        if address < 0 or address >= self.size:
            raise ProgramCounterOutOfBounds()
        self._pc = address
        return address

    def insert(self, instruction: str, argument: Optional[int] = None):
        if instruction in NO_ARGUMENT:
            cell = Cell(instruction, None)
        elif instruction in WITH_ARGUMENT:
            if argument is None:
                raise MissingArgument()
            cell = Cell(instruction, argument)
        else:
            raise InvalidInstruction()

        if self._pc >= self.size:
            raise AddressOutOfBounds()
        self.stack.insert(cell, self._pc)
        logger.debug('insert %s at %d', cell, self._pc)
        self._pc += 1

    def execute(self) -> Optional[int]:
        """
        Run from the current address until STOP or the end of the
        addressable region. Returns the payload of the last instruction
        that produced one.
        """
        if not 0 <= self._pc < self.size or self.stack.peek(self._pc) is None:
            raise NoInstructionAtAddress()

        result = None
        while 0 <= self._pc < self.size:
            cell = self.stack.peek(self._pc)
            if cell is None:
                self._pc += 1
                continue

            op, arg = cell
            logger.debug('%4d: %s %s', self._pc, op, '' if arg is None else arg)

            if op == 'MULT':
                result = self._multiply()

            elif op == 'CALL':
                if arg is None:
                    raise MissingCallArgument()
                result = self._call(arg)
                continue

            elif op == 'RET':
                result = self._return()
                continue

            elif op == 'PRINT':
                result = self._print()

            elif op == 'PUSH':
                self.stack.push(Cell(None, arg))

            elif op == 'STOP':
                return result

            else:
                raise InvalidInstruction()

            self._pc += 1

        return result

    # ── Instructions ──────────────────────────────────────────────────────────

    def _pop_value(self, error):
        """Pop a bare pushed value, or raise `error`."""
        cell = self.stack.pop()
        if cell is None or cell.argument is None or cell.opcode is not None:
            raise error()
        return cell.argument

    def _multiply(self) -> int:
        a = self._pop_value(InvalidMultiplicationOperands)
        b = self._pop_value(InvalidMultiplicationOperands)
        product = a * b
        self.stack.push(Cell(None, product))
        return product

    def _call(self, address: int) -> int:
        if address < 0 or address >= self.size:
            raise InvalidCallAddress()
        return self.set_address(address)

    def _return(self) -> int:
        address = self._pop_value(InvalidReturnValue)
        if address < 0 or address >= self.size:
            raise InvalidReturnAddress()
        self._pc = address
        return address

    def _print(self) -> int:
        value = self._pop_value(InvalidPrintOperand)
        self._emit(value)
        return value
