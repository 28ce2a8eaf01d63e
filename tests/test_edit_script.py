"""
Unit tests for edit_script.py: range validation, prompt construction and reply parsing.
"""

import unittest
import sys
from io import StringIO
from pathlib import Path
from unittest.mock import patch, MagicMock

# Add parent directory to path so we can import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

import edit_script
import llm_utils
from edit_script import edit_range, resolve_instruction, validate_range
from prompt_builders import EDIT_END_MARKER, EDIT_START_MARKER
from script_document import splice
from script_errors import InvalidArgument, ServiceUnavailable, UpstreamFailure, UpstreamUnavailable
from script_schemas import EDIT_REPLACEMENT_SCHEMA

SCRIPT = "Hello world"


class TestValidateRange(unittest.TestCase):
    """Test cases for validate_range."""

    def test_valid_ranges(self):
        self.assertEqual(validate_range(SCRIPT, 6, 11), (6, 11))
        self.assertEqual(validate_range(SCRIPT, 0, 1), (0, 1))
        self.assertEqual(validate_range(SCRIPT, 0, len(SCRIPT)), (0, 11))

    def test_integral_floats_accepted(self):
        self.assertEqual(validate_range(SCRIPT, 6.0, 11.0), (6, 11))

    def test_invalid_ranges(self):
        for start, end in ((-1, 3), (6, 12), (5, 5), (7, 6)):
            with self.subTest(start=start, end=end):
                with self.assertRaises(InvalidArgument):
                    validate_range(SCRIPT, start, end)

    def test_offsets_count_code_points(self):
        script = "Hi \U0001F30D world"
        self.assertEqual(validate_range(script, 5, 10), (5, 10))
        with self.assertRaises(InvalidArgument):
            validate_range(script, 6, 11)

    def test_non_integer_indices(self):
        for start, end in (("6", 11), (6, None), (6.5, 11), (True, 11)):
            with self.subTest(start=start, end=end):
                with self.assertRaises(InvalidArgument):
                    validate_range(SCRIPT, start, end)


class TestResolveInstruction(unittest.TestCase):

    def test_blank_uses_default(self):
        for value in (None, "", "   ", 5):
            with self.subTest(value=value):
                self.assertEqual(resolve_instruction(value), "Improve this text.")

    def test_instruction_kept(self):
        self.assertEqual(resolve_instruction(" make it louder "), "make it louder")


def _prompts(mock_generate_text):
    """(system, user) prompt strings from the messages sent to the gateway."""
    system_message, user_message = mock_generate_text.call_args[0][0]
    return system_message["content"], user_message["content"]


@patch.object(edit_script, "TEXT_STRUCTURED_OUTPUT", False)
@patch.object(llm_utils, "is_configured", return_value=True)
@patch.object(llm_utils, "generate_text")
class TestEditRange(unittest.TestCase):
    """Test edit_range end to end with the gateway mocked."""

    def test_structured_reply_scenario(self, mock_generate_text, mock_configured):
        mock_generate_text.return_value = '{"replacement": "EARTH"}'
        replacement = edit_range(SCRIPT, 6, 11, "world", "shout it")
        self.assertEqual(replacement, "EARTH")

        new_script, new_range = splice(SCRIPT, 6, 11, replacement)
        self.assertEqual(new_script, "Hello EARTH")
        self.assertEqual(new_range, (6, 11))

    def test_user_prompt_marks_span(self, mock_generate_text, mock_configured):
        mock_generate_text.return_value = '{"replacement": "EARTH"}'
        edit_range(SCRIPT, 6, 11, "world", "shout it")
        messages = mock_generate_text.call_args[0][0]
        self.assertEqual([m["role"] for m in messages], ["system", "user"])
        system_prompt, user_prompt = _prompts(mock_generate_text)
        self.assertIn(f"Hello {EDIT_START_MARKER}world{EDIT_END_MARKER}", user_prompt)
        self.assertIn("shout it", user_prompt)
        self.assertIn("replacement", system_prompt)
        self.assertIn(EDIT_START_MARKER, system_prompt)
        self.assertIsNone(mock_generate_text.call_args[1]["response_json_schema"])

    def test_blank_instruction_uses_default(self, mock_generate_text, mock_configured):
        mock_generate_text.return_value = '{"replacement": "planet"}'
        edit_range(SCRIPT, 6, 11, "world", "  ")
        self.assertIn("Improve this text.", _prompts(mock_generate_text)[1])

    def test_mismatched_selected_text_uses_indices(self, mock_generate_text, mock_configured):
        mock_generate_text.return_value = '{"replacement": "planet"}'
        with patch("sys.stdout", new_callable=StringIO) as out:
            replacement = edit_range(SCRIPT, 6, 11, "Hello", "rename")
        self.assertEqual(replacement, "planet")
        self.assertIn("WARNING", out.getvalue())
        user_prompt = _prompts(mock_generate_text)[1]
        self.assertIn(f"{EDIT_START_MARKER}world{EDIT_END_MARKER}", user_prompt)
        self.assertIn("SELECTED TEXT:\nworld", user_prompt)

    def test_matching_selected_text_no_warning(self, mock_generate_text, mock_configured):
        mock_generate_text.return_value = '{"replacement": "planet"}'
        with patch("sys.stdout", new_callable=StringIO) as out:
            edit_range(SCRIPT, 6, 11, "world", "rename")
        self.assertNotIn("WARNING", out.getvalue())

    def test_plain_text_reply_trimmed(self, mock_generate_text, mock_configured):
        mock_generate_text.return_value = "  planet Earth \n"
        self.assertEqual(edit_range(SCRIPT, 6, 11, None, "rename"), "planet Earth")

    def test_empty_reply_keeps_slice(self, mock_generate_text, mock_configured):
        for reply in ("", "   "):
            with self.subTest(reply=reply):
                mock_generate_text.return_value = reply
                self.assertEqual(edit_range(SCRIPT, 6, 11, None, "rename"), "world")

    def test_echoed_slice_is_identity(self, mock_generate_text, mock_configured):
        mock_generate_text.return_value = '{"replacement": "world"}'
        replacement = edit_range(SCRIPT, 6, 11, "world", "leave it")
        self.assertEqual(splice(SCRIPT, 6, 11, replacement)[0], SCRIPT)

    def test_invalid_input_never_calls_model(self, mock_generate_text, mock_configured):
        cases = [
            (None, 0, 1),
            (42, 0, 1),
            (SCRIPT, 6, 12),
            (SCRIPT, 3, 3),
            (SCRIPT, "a", 4),
            ("", 0, 1),
        ]
        for script, start, end in cases:
            with self.subTest(script=script, start=start, end=end):
                with self.assertRaises(InvalidArgument):
                    edit_range(script, start, end)
        mock_generate_text.assert_not_called()

    def test_not_configured(self, mock_generate_text, mock_configured):
        mock_configured.return_value = False
        with self.assertRaises(ServiceUnavailable):
            edit_range(SCRIPT, 6, 11, "world", "rename")
        mock_generate_text.assert_not_called()

    def test_upstream_failure_propagates(self, mock_generate_text, mock_configured):
        mock_generate_text.side_effect = UpstreamUnavailable("LLM provider request failed")
        with self.assertRaises(UpstreamFailure):
            edit_range(SCRIPT, 6, 11, "world", "rename")

    def test_structured_output_flag_sends_schema(self, mock_generate_text, mock_configured):
        mock_generate_text.return_value = '{"replacement": "EARTH"}'
        with patch.object(edit_script, "TEXT_STRUCTURED_OUTPUT", True):
            edit_range(SCRIPT, 6, 11, "world", "shout it")
        self.assertIs(mock_generate_text.call_args[1]["response_json_schema"], EDIT_REPLACEMENT_SCHEMA)


@patch.object(edit_script, "TEXT_STRUCTURED_OUTPUT", False)
@patch.object(llm_utils, "TEXT_BASE_URL", None)
@patch.object(llm_utils, "TEXT_PROVIDER", "openai")
@patch.dict("os.environ", {"OPENAI_API_KEY": "sk-test"}, clear=False)
class TestEditRangeProviderReply(unittest.TestCase):
    """edit_range against a mocked OpenAI client, through the real gateway."""

    @patch("openai.OpenAI")
    def test_missing_content_keeps_slice(self, mock_openai_class):
        # Refusals come back with message.content = None
        mock_resp = MagicMock()
        mock_resp.choices = [MagicMock()]
        mock_resp.choices[0].message.content = None
        mock_openai_class.return_value.chat.completions.create.return_value = mock_resp

        replacement = edit_range(SCRIPT, 6, 11, "world", "shout")
        self.assertEqual(replacement, "world")
        self.assertNotEqual(replacement, llm_utils.FALLBACK_COMPLETION_TEXT)
        self.assertEqual(splice(SCRIPT, 6, 11, replacement)[0], SCRIPT)

    @patch("openai.OpenAI")
    def test_reply_content_used(self, mock_openai_class):
        mock_resp = MagicMock()
        mock_resp.choices = [MagicMock()]
        mock_resp.choices[0].message.content = '{"replacement": "EARTH"}'
        mock_openai_class.return_value.chat.completions.create.return_value = mock_resp

        self.assertEqual(edit_range(SCRIPT, 6, 11, "world", "shout"), "EARTH")


if __name__ == "__main__":
    unittest.main()
