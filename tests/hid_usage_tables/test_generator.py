import importlib

from hid_usage_tables import codegen
from hid_usage_tables import configuration
from hid_usage_tables import diagnostics
from hid_usage_tables.cancellation import CancellationToken
from hid_usage_tables.generator import State
from hid_usage_tables.generator import UsagePageGenerator
from hid_usage_tables.generator import generate
from hid_usage_tables.output import DirectorySink
from hid_usage_tables.tables import UsageTables

ATTACHMENT = "HidUsageTables.json"


def _descriptors(context):
    return [entry.descriptor for entry in context.reporter]


def test_generate_from_origin(tmp_path, make_context, specification_file):
    context = make_context(**{configuration.KEY_SPECIFICATION: str(specification_file)})
    generator = UsagePageGenerator()

    result = generator.execute(context)

    assert result.completed
    assert not result.degraded
    assert result.tables.version == "1.5.0"
    assert result.pages == 3
    assert result.usages == 26
    assert len(context.sink) == 7
    assert codegen.REGISTRY_SOURCE in context.sink
    assert generator.history == [
        State.IDLE,
        State.RESOLVING_OPTIONS,
        State.SELECTING_CACHE_TIER,
        State.FETCHING_ORIGIN,
        State.PARSING,
        State.GENERATING,
        State.COMPLETED,
    ]
    assert (tmp_path / "cache" / "hut1_5.pdf").read_bytes() == specification_file.read_bytes()
    assert (tmp_path / "cache" / ATTACHMENT).exists()
    assert _descriptors(context) == [diagnostics.COMPLETED]
    assert context.reporter.of(diagnostics.COMPLETED)[0].args[:3] == ("1.5.0", 26, 3)


def test_second_run_uses_cache(make_context, specification_file):
    first = make_context(**{configuration.KEY_SPECIFICATION: str(specification_file)})
    generate(first)
    specification_file.unlink()
    second = make_context(**{configuration.KEY_SPECIFICATION: str(specification_file)})
    generator = UsagePageGenerator()

    result = generator.execute(second)

    assert result.completed
    assert State.READING_CACHE in generator.history
    assert State.FETCHING_ORIGIN not in generator.history
    assert second.sink.sources == first.sink.sources


def test_force_ignores_cache(tmp_path, make_context, specification_file):
    generate(make_context(**{configuration.KEY_SPECIFICATION: str(specification_file)}))
    (tmp_path / "cache" / ATTACHMENT).write_text("garbage")
    context = make_context(
        **{configuration.KEY_SPECIFICATION: str(specification_file), configuration.KEY_FORCE: True}
    )
    generator = UsagePageGenerator()

    result = generator.execute(context)

    assert result.completed
    assert not result.degraded
    assert State.READING_CACHE not in generator.history
    assert (tmp_path / "cache" / ATTACHMENT).read_bytes() != b"garbage"


def test_corrupt_cache_escalates_to_origin(tmp_path, make_context, specification_file):
    (tmp_path / "cache").mkdir()
    (tmp_path / "cache" / ATTACHMENT).write_text("{not json")
    context = make_context(**{configuration.KEY_SPECIFICATION: str(specification_file)})
    generator = UsagePageGenerator()

    result = generator.execute(context)

    assert result.completed
    assert not result.degraded
    assert generator.history.index(State.READING_CACHE) < generator.history.index(State.FETCHING_ORIGIN)
    assert _descriptors(context) == [diagnostics.DESERIALIZATION_FAILED, diagnostics.COMPLETED]
    assert (tmp_path / "cache" / ATTACHMENT).read_text().startswith("{")
    assert len(context.sink) == 7


def test_missing_document_degrades(tmp_path, make_context):
    context = make_context(**{configuration.KEY_SPECIFICATION: str(tmp_path / "missing.pdf")})

    result = generate(context)

    assert result.completed
    assert result.degraded
    assert result.tables is UsageTables.EMPTY
    assert list(context.sink.sources) == [codegen.REGISTRY_SOURCE]
    assert _descriptors(context) == [diagnostics.DOCUMENT_NOT_FOUND, diagnostics.COMPLETED]


def test_caching_disabled(make_context, specification_file):
    context = make_context(
        **{configuration.KEY_SPECIFICATION: str(specification_file), configuration.KEY_CACHE_FOLDER: ""}
    )

    result = generate(context)

    assert result.completed
    assert not result.degraded
    assert _descriptors(context) == [diagnostics.CACHING_DISABLED, diagnostics.COMPLETED]


def test_cancelled_before_start(make_context, specification_file):
    cancellation = CancellationToken()
    cancellation.cancel()
    context = make_context(cancellation, **{configuration.KEY_SPECIFICATION: str(specification_file)})
    generator = UsagePageGenerator()

    result = generator.execute(context)

    assert result.state is State.CANCELLED
    assert not result.completed
    assert generator.history[-1] is State.CANCELLED
    assert len(context.sink) == 0
    assert _descriptors(context) == [diagnostics.CANCELLED]


def test_cancelled_while_generating(mocker, make_context, specification_file):
    cancellation = CancellationToken()
    context = make_context(cancellation, **{configuration.KEY_SPECIFICATION: str(specification_file)})
    add_source = context.sink.add_source

    def _add_and_cancel(name, text):
        add_source(name, text)
        cancellation.cancel()

    mocker.patch.object(context.sink, "add_source", side_effect=_add_and_cancel)

    result = generate(context)

    assert result.state is State.CANCELLED
    assert len(context.sink) == 1
    assert _descriptors(context) == [diagnostics.CANCELLED]


def test_generated_package_imports(tmp_path, monkeypatch, make_context, specification_file):
    root = "generated_usages_for_import"
    context = make_context(
        sink=DirectorySink(tmp_path / "out" / root),
        **{configuration.KEY_SPECIFICATION: str(specification_file), configuration.KEY_ROOT_NAMESPACE: root},
    )
    assert generate(context).completed
    monkeypatch.syspath_prepend(str(tmp_path / "out"))

    registry = importlib.import_module(f"{root}.usage_page").UsagePages()
    enumeration = importlib.import_module(f"{root}.usages.generic_desktop").GenericDesktopPage

    assert sorted(registry) == [0x01, 0x09, 0x0B]
    assert registry.GenericDesktop.get_usage(0x30).name == "X"
    assert registry.get_usage(enumeration.Pointer).name == "Pointer"
    assert registry.get_usage(0x00090005).name == "Button 4"
    assert registry.get_usage(0x000900FF).name == "Button 254"
    assert registry.TelephonyDevice.get_usage(0xB3).name == "Phone Key 3"
    assert registry.TelephonyDevice.get_usage(0xB4).name == "Unknown Usage 0x00B4"


def test_malformed_source_degrades(make_context):
    context = make_context(**{configuration.KEY_SPECIFICATION: "http://[bad/hut.pdf"})

    result = generate(context)

    assert result.completed
    assert result.degraded
    assert list(context.sink.sources) == [codegen.REGISTRY_SOURCE]
    assert _descriptors(context) == [
        diagnostics.CACHING_DISABLED,
        diagnostics.DOCUMENT_NOT_FOUND,
        diagnostics.COMPLETED,
    ]
