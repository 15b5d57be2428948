"""Claude CLI adapter - subprocess wrapper for Claude Code."""

import logging
import subprocess

logger = logging.getLogger(__name__)

INSTALL_HINT = "Install with: npm install -g @anthropic-ai/claude-code"


class ClaudeCLIService:
    """
    Claude CLI subprocess adapter.

    Implements LLMService protocol. The prompt goes through stdin so long
    event lists never hit argv limits.
    """

    def __init__(self, binary: str = "claude", model: str | None = None, timeout: int = 120):
        self.binary = binary
        self.model = model
        self.timeout = timeout

    def _command(self) -> list[str]:
        cmd = [self.binary, "-p", "-", "--output-format", "text"]
        if self.model:
            cmd += ["--model", self.model]
        return cmd

    def generate(self, prompt: str) -> str:
        """Generate text from a prompt. Returns complete response."""
        try:
            proc = subprocess.run(
                self._command(),
                input=prompt,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise RuntimeError(f"Claude CLI '{self.binary}' not found. {INSTALL_HINT}")
        except subprocess.TimeoutExpired:
            raise RuntimeError(f"Claude CLI timed out after {self.timeout}s")

        if proc.returncode != 0:
            logger.error(f"Claude CLI failed: {proc.stderr}")
            raise RuntimeError(f"Claude CLI failed: {proc.stderr.strip()}")
        return proc.stdout
