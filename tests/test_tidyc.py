import io
import unittest

import config
import tidyc

class BeautifyTest(unittest.TestCase):
	def test_no_pass_keeps_source(self) -> None:
		source = b'void f(void)\n{\n\tint\tx;   \n\n\tgo(1,\t2);\n}\n'
		self.assertEqual(tidyc.beautify(io.BytesIO(source), config.Config()), source)

	def test_mixed_line_endings(self) -> None:
		source = b'int a;\r\nint b;\nint c;\r\n'
		self.assertEqual(tidyc.beautify(io.BytesIO(source), config.Config()), source)

	def test_crlf_kept_around_insertion(self) -> None:
		source = b'void f(void)\r\n{\r\n    if (a && b == 1)\r\n        go();\n}\r\n'
		result = tidyc.beautify(io.BytesIO(source), config.Config(paren_if_bool=True))
		self.assertEqual(result, b'void f(void)\r\n{\r\n    if (a && (b == 1))\r\n        go();\n}\r\n')

	def test_undecodable_bytes_round_trip(self) -> None:
		source = b'int a; /* \xff */\n'
		self.assertEqual(tidyc.beautify(io.BytesIO(source), config.Config()), source)

if __name__ == '__main__':
	unittest.main()
