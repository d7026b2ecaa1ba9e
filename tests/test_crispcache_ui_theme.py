import unittest

from crispcache_ui.style.theme import DEFAULT_TOKENS, ThemeProvider, parse_hex_rgba, validate_theme_tokens
from crispcache_ui.text.renderer import FontSpec


class ThemeTokensTests(unittest.TestCase):
    def test_validate_theme_defaults(self) -> None:
        tokens = validate_theme_tokens()
        self.assertEqual(tokens, DEFAULT_TOKENS)

    def test_validate_theme_accepts_partial_override(self) -> None:
        tokens = validate_theme_tokens({"live_lcd_bg": "#112233", "font_size_px": 16})
        self.assertEqual(tokens.live_lcd_bg, "#112233")
        self.assertEqual(tokens.font_size_px, 16.0)
        self.assertEqual(tokens.live_lcd_control_fg, DEFAULT_TOKENS.live_lcd_control_fg)

    def test_validate_theme_rejects_unknown_token(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown theme token"):
            validate_theme_tokens({"unknown": "#112233"})

    def test_validate_theme_rejects_invalid_hex_color(self) -> None:
        with self.assertRaisesRegex(ValueError, "hex color"):
            validate_theme_tokens({"live_lcd_control_fg": "red"})

    def test_validate_theme_rejects_non_positive_font_size(self) -> None:
        with self.assertRaisesRegex(ValueError, "positive finite number"):
            validate_theme_tokens({"font_size_px": 0})

    def test_validate_theme_rejects_non_finite_font_size(self) -> None:
        for value in (float("inf"), float("nan")):
            with self.subTest(value=value):
                with self.assertRaisesRegex(ValueError, "positive finite number"):
                    validate_theme_tokens({"font_size_px": value})

    def test_parse_hex_rgba(self) -> None:
        self.assertEqual(parse_hex_rgba("#FF5A1E"), (255, 90, 30, 255))
        self.assertEqual(parse_hex_rgba("#00000080"), (0, 0, 0, 128))
        with self.assertRaises(ValueError):
            parse_hex_rgba("FF5A1E")


class ThemeProviderTests(unittest.TestCase):
    def test_lookups_follow_token_updates(self) -> None:
        theme = ThemeProvider()
        self.assertEqual(theme.get_color("live_active_automation"), (255, 90, 30, 255))
        theme.update({"live_active_automation": "#010203"})
        self.assertEqual(theme.get_color("live_active_automation"), (1, 2, 3, 255))

    def test_font_lookup(self) -> None:
        theme = ThemeProvider(validate_theme_tokens({"font_family": "DejaVu Sans", "font_size_px": 12}))
        font = theme.get_font("label")
        self.assertEqual(font.font, FontSpec(family="DejaVu Sans"))
        self.assertEqual(font.size_px, 12.0)

    def test_unknown_names_raise_key_error(self) -> None:
        theme = ThemeProvider()
        with self.assertRaises(KeyError):
            theme.get_color("live_nope")
        with self.assertRaises(KeyError):
            theme.get_font("title")


if __name__ == "__main__":
    unittest.main()
