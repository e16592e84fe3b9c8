# test_computer.py
#
# Tests for the Computer execution engine in computer.py

import unittest

from computer import (Cell, Computer, Errors, Output,
                      AddressOutOfBounds, InvalidCallAddress, InvalidInstruction,
                      InvalidMultiplicationOperands, InvalidPrintOperand,
                      InvalidReturnAddress, InvalidReturnValue, MissingArgument,
                      MissingCallArgument, NoInstructionAtAddress,
                      ProgramCounterOutOfBounds)


class TestAddress(unittest.TestCase):
    SIZE = 10

    def setUp(self):
        self.c = Computer.new(self.SIZE)

    def tearDown(self):
        self.c = None

    def test_01_initial_address(self):
        self.assertEqual(0, self.c.program_counter)

    def test_02_set_address(self):
        for addr in range(self.SIZE):
            self.assertEqual(addr, self.c.set_address(addr))
            self.assertEqual(addr, self.c.program_counter)

    def test_03_set_negative_address(self):
        self.c.set_address(3)
        with self.assertRaises(ProgramCounterOutOfBounds) as cm:
            self.c.set_address(-2)
        self.assertEqual(Errors.PcOutOfBounds, str(cm.exception))
        self.assertEqual(3, self.c.program_counter)

    def test_04_set_address_past_end(self):
        with self.assertRaises(ProgramCounterOutOfBounds):
            self.c.set_address(self.SIZE)
        self.assertEqual(0, self.c.program_counter)

    def test_05_default_size(self):
        self.assertEqual(100, Computer.new(0).size)


class TestInsert(unittest.TestCase):
    SIZE = 10

    def setUp(self):
        self.c = Computer.new(self.SIZE)

    def tearDown(self):
        self.c = None

    def test_01_insert_advances(self):
        self.c.set_address(4)
        self.c.insert('PUSH', 9)
        self.assertEqual(Cell('PUSH', 9), self.c.stack.peek(4))
        self.assertEqual(5, self.c.program_counter)

    def test_02_no_argument_instructions(self):
        for op in ('MULT', 'RET', 'STOP', 'PRINT'):
            self.c.insert(op)
        for addr, op in enumerate(('MULT', 'RET', 'STOP', 'PRINT')):
            self.assertEqual(Cell(op, None), self.c.stack.peek(addr))

    def test_03_argument_ignored_for_no_argument_instruction(self):
        self.c.insert('STOP', 5)
        self.assertEqual(Cell('STOP', None), self.c.stack.peek(0))

    def test_04_missing_argument(self):
        for op in ('CALL', 'PUSH'):
            with self.assertRaises(MissingArgument):
                self.c.insert(op)
        self.assertEqual(0, self.c.program_counter)
        self.assertIsNone(self.c.stack.peek(0))

    def test_05_invalid_instruction(self):
        with self.assertRaises(InvalidInstruction):
            self.c.insert('JUMP', 3)
        with self.assertRaises(InvalidInstruction):
            self.c.insert('push', 3)
        self.assertEqual(0, self.c.program_counter)

    def test_06_insert_past_end(self):
        self.c.set_address(self.SIZE - 1)
        self.c.insert('STOP')
        self.assertEqual(self.SIZE, self.c.program_counter)
        with self.assertRaises(AddressOutOfBounds):
            self.c.insert('STOP')
        self.assertEqual(self.SIZE, self.c.program_counter)


class TestExecute(unittest.TestCase):
    SIZE = 10

    def setUp(self):
        self.outs = Output()
        self.c = Computer.new(self.SIZE, outs=self.outs)

    def tearDown(self):
        self.c = None

    def load(self, *program):
        for instr in program:
            self.c.insert(*instr)
        self.c.set_address(0)

    def test_01_no_instruction(self):
        with self.assertRaises(NoInstructionAtAddress):
            self.c.execute()

    def test_02_mult(self):
        self.load(('PUSH', 6), ('PUSH', 2), ('MULT',), ('STOP',))
        self.assertEqual(12, self.c.execute())
        self.assertEqual(Cell(None, 12), self.c.stack.pop())

    def test_03_mult_not_enough_arguments(self):
        self.load(('PUSH', 6), ('MULT',), ('STOP',))
        with self.assertRaises(InvalidMultiplicationOperands):
            self.c.execute()
        self.assertEqual(1, self.c.program_counter)

    def test_04_mult_invalid_argument(self):
        """An instruction cell is never taken as a pushed value"""
        self.c.set_address(self.SIZE - 1)
        self.c.insert('CALL', 2)
        self.c.set_address(0)
        self.load(('PUSH', 6), ('MULT',), ('STOP',))
        with self.assertRaises(InvalidMultiplicationOperands):
            self.c.execute()

    def test_05_call(self):
        self.c.set_address(5)
        self.c.insert('STOP')
        self.c.set_address(0)
        self.load(('CALL', 5))
        self.assertEqual(5, self.c.execute())
        self.assertEqual(5, self.c.program_counter)

    def test_06_call_invalid_address(self):
        self.load(('CALL', 50), ('STOP',))
        with self.assertRaises(InvalidCallAddress):
            self.c.execute()
        self.assertEqual(0, self.c.program_counter)

    def test_07_call_negative_address(self):
        self.load(('CALL', -2), ('STOP',))
        with self.assertRaises(InvalidCallAddress):
            self.c.execute()

    def test_08_call_missing_argument(self):
        self.c.stack.insert(Cell('CALL', None), 0)
        with self.assertRaises(MissingCallArgument):
            self.c.execute()

    def test_09_return(self):
        self.load(('PUSH', 2), ('CALL', 6), ('STOP',))
        self.c.set_address(6)
        self.c.insert('RET')
        self.c.set_address(0)
        self.assertEqual(2, self.c.execute())
        self.assertEqual(2, self.c.program_counter)

    def test_10_return_invalid_argument(self):
        self.load(('RET',), ('STOP',))
        with self.assertRaises(InvalidReturnValue) as cm:
            self.c.execute()
        self.assertEqual(Errors.InvalidArgumentRetInt, str(cm.exception))

    def test_11_return_invalid_address(self):
        self.load(('PUSH', self.SIZE), ('RET',), ('STOP',))
        with self.assertRaises(InvalidReturnAddress):
            self.c.execute()
        self.assertEqual(1, self.c.program_counter)

    def test_12_print(self):
        self.load(('PUSH', 6), ('PRINT',), ('STOP',))
        self.assertEqual(6, self.c.execute())
        self.assertEqual(['6'], self.outs.get())

    def test_13_print_nil_argument(self):
        self.load(('PRINT',), ('STOP',))
        with self.assertRaises(InvalidPrintOperand):
            self.c.execute()
        self.assertEqual([], self.outs.get())

    def test_14_print_invalid_argument(self):
        self.c.set_address(self.SIZE - 1)
        self.c.insert('CALL', 50)
        self.c.set_address(0)
        self.load(('PRINT',), ('STOP',))
        with self.assertRaises(InvalidPrintOperand):
            self.c.execute()

    def test_15_stop_first(self):
        self.load(('STOP',))
        self.assertIsNone(self.c.execute())
        self.assertEqual(0, self.c.program_counter)

    def test_16_run_off_end(self):
        """A program without STOP ends at the last address"""
        self.load(('PUSH', 3), ('PUSH', 4), ('MULT',))
        self.assertEqual(12, self.c.execute())
        self.assertEqual(self.SIZE, self.c.program_counter)

    def test_17_push_keeps_last_result(self):
        self.load(('PUSH', 3), ('PRINT',), ('PUSH', 4), ('STOP',))
        self.assertEqual(3, self.c.execute())

    def test_18_invalid_instruction_in_store(self):
        self.c.stack.insert(Cell('JUMP', 1), 0)
        with self.assertRaises(InvalidInstruction):
            self.c.execute()

    def test_19_no_output_sink(self):
        c = Computer.new(5)
        c.insert('PUSH', 1)
        c.insert('PRINT')
        c.set_address(0)
        self.assertEqual(1, c.execute())

    def test_21_no_instruction_past_end_with_pushed_data(self):
        """Pushed data after the last slot is never treated as an instruction"""
        c = Computer.new(2)
        c.insert('PUSH', 5)
        c.insert('STOP')
        c.set_address(0)
        c.execute()
        c.set_address(1)
        c.insert('STOP')
        self.assertEqual(2, c.program_counter)
        self.assertEqual(Cell(None, 5), c.stack.peek(2))
        with self.assertRaises(NoInstructionAtAddress):
            c.execute()

    def test_22_no_instruction_past_end(self):
        c = Computer.new(2)
        c.set_address(1)
        c.insert('STOP')
        with self.assertRaises(NoInstructionAtAddress):
            c.execute()

    def test_20_subroutine(self):
        self.c.set_address(7)
        self.load(('MULT',), ('PRINT',), ('RET',))
        self.c.set_address(0)
        self.load(('PUSH', 4), ('PUSH', 101), ('PUSH', 10), ('CALL', 7), ('STOP',))
        self.c.execute()
        self.assertEqual(['1010'], self.outs.get())
        self.assertEqual(4, self.c.program_counter)


if __name__ == "__main__":
    unittest.main()
