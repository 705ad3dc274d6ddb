"""
业务服务测试
"""

import pytest

from voicepair.core.exceptions import (
    ParseError,
    PayloadTooLargeError,
    StorageError,
    UnknownAudioReferenceError,
    ValidationError,
)
from voicepair.core.storage import SampleStore
from voicepair.services.audio import AudioService, read_limited_body, validate_language
from voicepair.services.pairs import PairService, parse_link_payload, validate_link_payload
from voicepair.services.samples import SampleService, normalize_kind
from voicepair.services.transcription import StubTranscriber, Transcriber


async def _chunks(*parts):
    for part in parts:
        yield part


class EchoTranscriber(Transcriber):
    """返回音频长度的转录器"""

    async def transcribe(self, audio: bytes, lang: str) -> str:
        return f"{lang}:{len(audio)}"


class TestAudioService:
    """音频服务测试"""

    def test_validate_language(self):
        assert validate_language("en") == "en"
        assert validate_language("ht") == "ht"
        for lang in ("fr", "EN", "", "en-US"):
            with pytest.raises(ValidationError):
                validate_language(lang)

    @pytest.mark.asyncio
    async def test_read_limited_body(self):
        body = await read_limited_body(_chunks(b"ab", b"c"), max_size=3)
        assert body == b"abc"

    @pytest.mark.asyncio
    async def test_read_limited_body_rejects_declared_length(self):
        with pytest.raises(PayloadTooLargeError) as exc_info:
            await read_limited_body(_chunks(b"abc"), max_size=2, declared_length=3)
        assert exc_info.value.details == {"limit": 2, "received": 3}

    @pytest.mark.asyncio
    async def test_read_limited_body_stops_streaming(self):
        consumed = []

        async def stream():
            for part in (b"aa", b"bb", b"cc"):
                consumed.append(part)
                yield part

        with pytest.raises(PayloadTooLargeError):
            await read_limited_body(stream(), max_size=3)
        assert consumed == [b"aa", b"bb"]

    @pytest.mark.asyncio
    async def test_stub_transcripts(self):
        transcriber = StubTranscriber()
        assert await transcriber.transcribe(b"", "en") == "Hello World (ASR stub)"
        assert await transcriber.transcribe(b"", "ht") == "Bonjou mond (ASR stub)"

    @pytest.mark.asyncio
    async def test_ingest_uses_transcriber(self, tmp_path):
        service = AudioService(SampleStore(tmp_path), 1024, EchoTranscriber())

        record = await service.ingest("ht", "audio/wav", b"12345")

        assert record.transcript == "ht:5"
        assert record.codec == "pcm_s16le"
        assert (tmp_path / "audio" / "ht" / f"{record.id}.wav").read_bytes() == b"12345"
        assert (tmp_path / "audio" / "ht" / f"{record.id}.json").exists()

    @pytest.mark.asyncio
    async def test_ingest_storage_failure(self, tmp_path):
        blocker = tmp_path / "data"
        blocker.write_text("not a directory")
        service = AudioService(SampleStore(blocker), 1024)

        with pytest.raises(StorageError):
            await service.ingest("en", "audio/webm", b"abc")


class TestPairService:
    """样本对服务测试"""

    def test_parse_link_payload(self):
        assert parse_link_payload(b'{"term": "Diabetes"}') == {"term": "Diabetes"}
        for raw in (b"", b"{not json", b"[1, 2]", b'"text"', b"\xff\xfe"):
            with pytest.raises(ParseError):
                parse_link_payload(raw)

    def test_missing_fields_are_all_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_link_payload({"term": "  ", "consent": True})

        assert exc_info.value.missing_fields == ["term", "category", "enAudioId", "htAudioId"]
        assert exc_info.value.consent_required is False

    @pytest.mark.parametrize("overrides, expected_missing", [
        ({"term": ["x"], "category": 0}, ["term", "category"]),
        ({"enAudioId": 42}, ["enAudioId"]),
        ({"htAudioId": {"id": "ht-1"}}, ["htAudioId"]),
        ({"category": True}, ["category"]),
    ])
    def test_non_string_required_fields_are_missing(self, overrides, expected_missing, test_data_factory):
        with pytest.raises(ValidationError) as exc_info:
            validate_link_payload(test_data_factory.link_payload(**overrides))

        assert exc_info.value.missing_fields == expected_missing

    @pytest.mark.parametrize("field, value", [
        ("enText", 7),
        ("htText", ["Tansyon wo"]),
        ("annotator", {"name": "wally"}),
    ])
    @pytest.mark.asyncio
    async def test_non_string_optional_fields_are_rejected(self, field, value, tmp_path, test_data_factory):
        service = PairService(SampleStore(tmp_path))

        with pytest.raises(ValidationError) as exc_info:
            await service.link(test_data_factory.link_payload(**{field: value}))

        assert exc_info.value.details == {"invalidFields": [field]}
        assert not (tmp_path / "pairs").exists()

    @pytest.mark.parametrize("consent", [False, None, "true", 1])
    def test_consent_must_be_true(self, consent, test_data_factory):
        payload = test_data_factory.link_payload(consent=consent)
        with pytest.raises(ValidationError) as exc_info:
            validate_link_payload(payload)

        assert exc_info.value.consent_required is True
        assert exc_info.value.missing_fields == []

    @pytest.mark.asyncio
    async def test_link_defaults(self, tmp_path):
        service = PairService(SampleStore(tmp_path))

        record = await service.link({
            "term": "Diabetes",
            "category": "medical",
            "enAudioId": "x",
            "htAudioId": "y",
            "annotator": "",
            "consent": True
        })

        assert record.en.text == "Diabetes"
        assert record.ht.text == ""
        assert record.annotator == "anonymous"
        assert (tmp_path / "pairs" / f"{record.sample_id}.pair.json").exists()

    @pytest.mark.asyncio
    async def test_link_verifies_references_when_enabled(self, tmp_path, test_data_factory):
        store = SampleStore(tmp_path)
        test_data_factory.write_audio(store, "en-ok", lang="en")
        test_data_factory.write_audio(store, "ht-in-en", lang="en")
        service = PairService(store, verify_audio_refs=True)

        with pytest.raises(UnknownAudioReferenceError) as exc_info:
            await service.link(test_data_factory.link_payload(enAudioId="en-ok", htAudioId="ht-in-en"))

        assert exc_info.value.details == {"unresolved": {"htAudioId": "ht-in-en"}}
        assert not store.pairs_dir.exists()


class TestSampleService:
    """样本列表服务测试"""

    @pytest.mark.parametrize("kind, expected", [
        (None, "all"),
        ("", "all"),
        ("audio", "audio"),
        ("PAIR", "pair"),
        (" all ", "all"),
        ("bogus", "all"),
    ])
    def test_normalize_kind(self, kind, expected):
        assert normalize_kind(kind) == expected

    @pytest.mark.asyncio
    async def test_invalid_records_are_skipped(self, tmp_path, test_data_factory):
        store = SampleStore(tmp_path)
        test_data_factory.write_pair(store, "good", mtime=1000)
        test_data_factory.write_pair(store, "bad-schema", mtime=2000, consent=False)
        (store.pairs_dir / "truncated.pair.json").write_text('{"kind": "pa')

        kind, items = await SampleService(store).list_samples("pair")

        assert kind == "pair"
        assert [item["sampleId"] for item in items] == ["good"]

    @pytest.mark.asyncio
    async def test_limit_applies_before_parsing(self, tmp_path, test_data_factory):
        store = SampleStore(tmp_path)
        for i in range(5):
            test_data_factory.write_pair(store, f"pair-{i}", mtime=1000 + i)

        _, items = await SampleService(store, limit=3).list_samples("all")

        assert [item["sampleId"] for item in items] == ["pair-4", "pair-3", "pair-2"]
