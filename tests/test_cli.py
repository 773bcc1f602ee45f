"""Tests for CLI configuration and commands."""
import pytest
import typer
from conftest import FakeCapability, FakeChatHandle, RecordingFactory
from typer.testing import CliRunner

from nextus.cli import app as cli_app
from nextus.cli import providers
from nextus.conversation import ChatController
from nextus.llm import GenerationConfig

ENV_VARIABLES = (
    "LLM_PROVIDER",
    "GEMINI_API_KEY",
    "NEXT_PUBLIC_GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "OPENAI_API_KEY",
    "DEEPSEEK_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_MODEL",
    "OPENAI_CHAT_MODEL",
    "NEXTUS_TEMPERATURE",
    "NEXTUS_TOP_P",
    "NEXTUS_TOP_K",
    "NEXTUS_MAX_OUTPUT_TOKENS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove configuration variables inherited from the environment."""
    for name in ENV_VARIABLES:
        monkeypatch.delenv(name, raising=False)


class TestProviders:
    """Tests for environment-driven configuration."""

    def test_default_provider(self):
        """Test that Gemini is the default provider."""
        assert providers.get_provider_name() == "gemini"

    def test_claude_alias(self, monkeypatch):
        """Test that 'claude' selects the Anthropic provider."""
        monkeypatch.setenv("LLM_PROVIDER", "Claude")
        assert providers.get_provider_name() == "anthropic"

    def test_unknown_provider_exits(self, monkeypatch):
        """Test that an unknown provider stops the CLI."""
        monkeypatch.setenv("LLM_PROVIDER", "mystery")
        with pytest.raises(typer.Exit):
            providers.get_provider_name()

    def test_missing_credential_is_none(self):
        """Test that an absent key is reported as None."""
        assert providers.get_credential("gemini") is None

    def test_credential_fallback_order(self, monkeypatch):
        """Test that GEMINI_API_KEY wins over the fallbacks."""
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        assert providers.get_credential("gemini") == "google-key"

        monkeypatch.setenv("GEMINI_API_KEY", "  gemini-key  ")
        assert providers.get_credential("gemini") == "gemini-key"

    def test_blank_credential_is_none(self, monkeypatch):
        """Test that a whitespace-only key counts as missing."""
        monkeypatch.setenv("OPENAI_API_KEY", "   ")
        assert providers.get_credential("openai") is None

    def test_generation_config_defaults(self):
        """Test the default generation config for Gemini."""
        config = providers.get_generation_config("gemini")

        assert config.model == "gemini-2.5-flash"
        assert config.temperature == 1.0
        assert config.top_p == 0.95
        assert config.top_k == 64
        assert config.max_output_tokens == 65536
        assert config.system_instruction

    def test_generation_config_from_env(self, monkeypatch):
        """Test overriding generation parameters."""
        monkeypatch.setenv("NEXTUS_TEMPERATURE", "0.2")
        monkeypatch.setenv("NEXTUS_TOP_K", "20")
        monkeypatch.setenv("OPENAI_CHAT_MODEL", "gpt-4o")

        config = providers.get_generation_config("openai")

        assert config.temperature == 0.2
        assert config.top_k == 20
        assert config.model == "gpt-4o"

    def test_invalid_number(self, monkeypatch):
        """Test that a non-numeric value is reported as a bad parameter."""
        monkeypatch.setenv("NEXTUS_TOP_K", "many")
        with pytest.raises(typer.BadParameter, match="NEXTUS_TOP_K"):
            providers.get_generation_config("gemini")

    @pytest.mark.parametrize(
        "name,value",
        [
            ("NEXTUS_TEMPERATURE", "5"),
            ("NEXTUS_TOP_P", "0"),
            ("NEXTUS_TOP_K", "0"),
            ("NEXTUS_MAX_OUTPUT_TOKENS", "-1"),
        ],
    )
    def test_out_of_range_number(self, monkeypatch, name, value):
        """Test that a numeric value outside its range names the variable."""
        monkeypatch.setenv(name, value)
        with pytest.raises(typer.BadParameter, match=name):
            providers.get_generation_config("gemini")

    def test_out_of_range_number_is_usage_error(self, monkeypatch):
        """Test that commands report a bad setting as a usage error."""
        monkeypatch.setenv("NEXTUS_TEMPERATURE", "5")

        result = CliRunner().invoke(cli_app.app, ["info"])

        assert result.exit_code == 2
        assert not isinstance(result.exception, ValueError)
        assert "NEXTUS_TEMPERATURE" in result.output

    def test_build_controller_without_key(self):
        """Test that a missing key still yields a controller, which then reports it."""
        controller = providers.build_controller()

        session = controller.start()

        assert not session.established
        assert "Configuration Error" in controller.snapshot()[0].content


@pytest.fixture
def scripted_controller(monkeypatch):
    """Make the CLI build controllers around a scripted handle."""
    handle = FakeChatHandle(replies=["Your balance is $100"])

    def build(console=None, debug_callback=None):
        return ChatController(
            RecordingFactory(FakeCapability(handle)),
            GenerationConfig(),
            credential="test-key",
            debug_callback=debug_callback,
        )

    monkeypatch.setattr(cli_app, "build_controller", build)
    return handle


class TestCommands:
    """Tests for the Typer commands."""

    def test_ask(self, scripted_controller):
        """Test a single question and its printed answer."""
        result = CliRunner().invoke(cli_app.app, ["ask", "What is my balance?"])

        assert result.exit_code == 0
        assert "Your balance is $100" in result.output
        assert scripted_controller.sent == ["What is my balance?"]

    def test_ask_failure_exits_nonzero(self, scripted_controller):
        """Test that a failed turn sets a non-zero exit code."""
        scripted_controller.replies = [RuntimeError("network timeout")]

        result = CliRunner().invoke(cli_app.app, ["ask", "hello"])

        assert result.exit_code == 1
        assert "network timeout" in result.output

    def test_ask_without_key(self):
        """Test that a missing key is reported and exits non-zero."""
        result = CliRunner().invoke(cli_app.app, ["ask", "hello"])

        assert result.exit_code == 1
        assert "Configuration Error" in result.output

    def test_chat_session(self, scripted_controller):
        """Test the line-mode chat until the user leaves."""
        result = CliRunner().invoke(cli_app.app, ["chat"], input="What is my balance?\nexit\n")

        assert result.exit_code == 0
        assert "Hello!" in result.output
        assert "Your balance is $100" in result.output
        assert "Goodbye!" in result.output

    def test_info(self, monkeypatch):
        """Test the settings table."""
        monkeypatch.setenv("GEMINI_API_KEY", "secret")

        result = CliRunner().invoke(cli_app.app, ["info"])

        assert result.exit_code == 0
        assert "gemini-2.5-flash" in result.output
        assert "secret" not in result.output
