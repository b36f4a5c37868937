"""Unit tests for TranscriptCorrector."""

import pytest

from koememo.cleanup.corrector import TranscriptCorrector
from koememo.exceptions import CorrectionError, DegenerateInputError, ProviderAPIError


@pytest.mark.unit
class TestTranscriptCorrector:

    @pytest.mark.asyncio
    async def test_correct(self, fake_engine):
        corrector = TranscriptCorrector(fake_engine, temperature=0.2)
        fake_engine.response = "  今日は会議です。 \n"

        result = await corrector.correct("きょうは会議です")

        assert result == "今日は会議です。"
        assert fake_engine.temperatures == [0.2]
        assert "きょうは会議です" in fake_engine.prompts[0]
        assert "フィラー" not in fake_engine.prompts[0]

    @pytest.mark.asyncio
    async def test_combined_prompt_uses_combined_temperature(self, fake_engine):
        corrector = TranscriptCorrector(fake_engine, temperature=0.2, combined_temperature=0.5)

        await corrector.correct("えー、テスト", combined=True)

        assert fake_engine.temperatures == [0.5]
        assert "フィラー" in fake_engine.prompts[0]

    @pytest.mark.asyncio
    async def test_temperature_override(self, fake_engine):
        corrector = TranscriptCorrector(fake_engine)
        await corrector.correct("テスト", temperature=0.0)
        assert fake_engine.temperatures == [0.0]

    @pytest.mark.asyncio
    async def test_empty_response(self, fake_engine):
        fake_engine.response = "   "
        corrector = TranscriptCorrector(fake_engine)

        with pytest.raises(CorrectionError):
            await corrector.correct("テスト")

    @pytest.mark.asyncio
    async def test_provider_failure_wrapped(self, fake_engine):
        fake_engine.error = ProviderAPIError("Gemini API error: 500", status=500)
        corrector = TranscriptCorrector(fake_engine)

        with pytest.raises(CorrectionError) as exc_info:
            await corrector.correct("テスト")
        assert isinstance(exc_info.value.__cause__, ProviderAPIError)

    @pytest.mark.asyncio
    async def test_empty_input_not_sent(self, fake_engine):
        corrector = TranscriptCorrector(fake_engine)

        with pytest.raises(DegenerateInputError):
            await corrector.correct(" ")
        assert fake_engine.prompts == []
