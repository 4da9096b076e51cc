"""Tests for sharespider/__main__.py module."""

from unittest.mock import patch


class TestMainModule:
    """Tests for __main__.py entry point."""

    def test_main_imported(self):
        """main function is importable from cli."""
        from sharespider.cli import main

        assert callable(main)

    @patch("sharespider.cli.main")
    def test_main_module_structure(self, mock_main):
        """__main__.py exposes main without running it on import."""
        import sharespider.__main__ as main_mod

        assert hasattr(main_mod, "main")
        mock_main.assert_not_called()
