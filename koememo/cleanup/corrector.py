"""Model-based correction of transcripts."""

import logging
from typing import Optional, Protocol

from ..exceptions import CorrectionError, DegenerateInputError, ProviderAPIError

logger = logging.getLogger(__name__)


class CorrectionEngine(Protocol):
    """Protocol for text models that can answer a prompt."""

    async def send_prompt(self, prompt: str, temperature: float = 0.2) -> str:
        """Send a prompt to the engine and get response."""
        ...


CORRECTION_PROMPT = """あなたは日本語の文章校正を担当する編集者です。
次の文字起こしテキストを校正してください。

# 文字起こしテキスト
{transcript}

# 校正の方針
1. 誤字脱字を直す
2. 句読点を適切な位置に置く
3. 文法の誤りを直す
4. 文のつながりを自然にする
5. 話し言葉の調子はそのまま残し、必要以上に丁寧語へ書き換えない

元の意味を変えずに、校正後のテキストだけを出力してください。説明や前置きは不要です。"""

COMBINED_PROMPT = """あなたは日本語の文章校正を担当する編集者です。
次の文字起こしテキストを校正してください。

# 文字起こしテキスト
{transcript}

# 校正の方針
1. 「あー」「えー」「うーん」「あの」「えっと」「まあ」「ええと」などのフィラーをすべて取り除く
2. 誤字脱字を直す
3. 句読点を適切な位置に置く
4. 文法の誤りを直す
5. 文のつながりを自然にする
6. 話し言葉の調子はそのまま残し、必要以上に丁寧語へ書き換えない

元の意味を変えずに、校正後のテキストだけを出力してください。説明や前置きは不要です。"""


class TranscriptCorrector:
    """Corrects transcripts using any compatible correction engine."""

    def __init__(self, engine: CorrectionEngine, temperature: float = 0.2,
                 combined_temperature: float = 0.5):
        """Initialize transcript corrector.

        Args:
            engine: Text model implementing the CorrectionEngine protocol
            temperature: Sampling temperature for plain correction
            combined_temperature: Sampling temperature for the combined filler+correction prompt
        """
        self.engine = engine
        self.temperature = temperature
        self.combined_temperature = combined_temperature

        logger.info("TranscriptCorrector initialized")

    def build_prompt(self, transcript: str, combined: bool = False) -> str:
        template = COMBINED_PROMPT if combined else CORRECTION_PROMPT
        return template.format(transcript=transcript)

    async def correct(self, transcript: str, combined: bool = False,
                      temperature: Optional[float] = None) -> str:
        """Return the corrected transcript.

        Args:
            transcript: Raw transcript
            combined: Also ask the model to drop filler words
            temperature: Override the configured temperature

        Raises:
            DegenerateInputError: transcript is empty
            CorrectionError: the model failed or answered with nothing
        """
        if not transcript or not transcript.strip():
            raise DegenerateInputError("No text to correct")

        if temperature is None:
            temperature = self.combined_temperature if combined else self.temperature

        logger.debug(f"Correction start (temperature={temperature}, combined={combined}): {transcript[:100]}")
        try:
            corrected = await self.engine.send_prompt(self.build_prompt(transcript, combined),
                                                      temperature=temperature)
        except ProviderAPIError as e:
            raise CorrectionError(f"Correction request failed (temperature={temperature}): {e}") from e

        if not corrected or not corrected.strip():
            raise CorrectionError("Correction model returned empty text")

        logger.debug(f"Correction done: {corrected[:100]}")
        return corrected.strip()
