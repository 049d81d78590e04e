import json

import pytest

from services.batch import classify_all
from services.extractor import NO_DESCRIPTIONS_MESSAGE
from services.hierarchy import parse_hierarchy
from services.models import EXPORT_COLUMNS
from services.session import (
    ClassificationSession,
    SessionPhase,
    SessionStateError,
    export_results,
    process_upload,
)
from services.tabular import TabularCodecError

HIERARCHY = parse_hierarchy(
    """
01 PRODUITS FRAIS
  0101 FRUITS ET LEGUMES
    010101 FRUITS
      01010101 POMMES ET POIRES
"""
)

POMMES_PAYLOAD = {
    "secteur_code": "01",
    "secteur_name": "PRODUITS FRAIS",
    "rayon_code": "0101",
    "rayon_name": "FRUITS ET LEGUMES",
    "famille_code": "010101",
    "famille_name": "FRUITS",
    "sous_famille_code": "01010101",
    "sous_famille_name": "POMMES ET POIRES",
}


class FakeCodec:
    """In-memory codec: ``parse`` returns fixed rows, ``serialize`` records rows."""

    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.serialized = None

    def parse(self, data):
        if self.error is not None:
            raise self.error
        return list(self.rows)

    def serialize(self, rows):
        self.serialized = list(rows)
        return b"xlsx-bytes"


class DummyClient:
    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = 0
        outer = self

        class _Completions:
            def create(self, **kwargs):
                outer.calls += 1
                reply = outer.replies.pop(0)
                if isinstance(reply, Exception):
                    raise reply
                return {"choices": [{"message": {"content": json.dumps(reply)}}]}

        self.chat = type("Chat", (), {"completions": _Completions()})()


def _classifier(client):
    return lambda products: classify_all(client, products, HIERARCHY)


def test_scenario_a_full_path_is_exported():
    session = ClassificationSession()
    codec = FakeCodec(rows=[{"Libellé": "Pommes Golden 1kg"}])
    client = DummyClient(POMMES_PAYLOAD)

    process_upload(session, b"...", "produits.xlsx", codec=codec, classify=_classifier(client))

    assert session.phase is SessionPhase.RESULTS
    assert not session.is_loading
    assert session.error is None
    file_name, data = export_results(session, codec)
    assert file_name == "classified_produits.xlsx"
    assert data == b"xlsx-bytes"
    assert codec.serialized == [
        {
            "Description": "Pommes Golden 1kg",
            "Secteur Code": "01",
            "Secteur Nom": "PRODUITS FRAIS",
            "Rayon Code": "0101",
            "Rayon Nom": "FRUITS ET LEGUMES",
            "Famille Code": "010101",
            "Famille Nom": "FRUITS",
            "Sous-Famille Code": "01010101",
            "Sous-Famille Nom": "POMMES ET POIRES",
        }
    ]
    assert list(codec.serialized[0]) == list(EXPORT_COLUMNS)


def test_scenario_b_blank_only_row_reports_no_descriptions():
    session = ClassificationSession()
    client = DummyClient()

    process_upload(
        session,
        b"...",
        "vide.xlsx",
        codec=FakeCodec(rows=[{"Other": "   "}]),
        classify=_classifier(client),
    )

    assert session.phase is SessionPhase.ERROR
    assert session.error == NO_DESCRIPTIONS_MESSAGE
    assert session.classified_products == ()
    assert client.calls == 0


def test_scenario_c_timeout_exports_unclassified_row():
    session = ClassificationSession()
    codec = FakeCodec(rows=[{"Description": "Widget X"}])
    client = DummyClient(TimeoutError("Request timed out"))

    process_upload(session, b"...", "widgets.xlsx", codec=codec, classify=_classifier(client))
    export_results(session, codec)

    row = codec.serialized[0]
    assert row["Description"] == "Widget X"
    for level in ("Secteur", "Rayon", "Famille", "Sous-Famille"):
        assert row[f"{level} Code"] == "N/A"
        assert row[f"{level} Nom"] == "NON CLASSIFIÉ"


def test_unreadable_file_never_starts_the_batch():
    session = ClassificationSession()
    client = DummyClient()

    process_upload(
        session,
        b"garbage",
        "broken.xlsx",
        codec=FakeCodec(error=TabularCodecError("Failed to read the file: bad zip")),
        classify=_classifier(client),
    )

    assert session.phase is SessionPhase.ERROR
    assert session.error == "Failed to read the file: bad zip"
    assert client.calls == 0


def test_new_upload_replaces_previous_results():
    session = ClassificationSession()
    client = DummyClient(POMMES_PAYLOAD, POMMES_PAYLOAD, POMMES_PAYLOAD)

    process_upload(
        session,
        b"...",
        "a.xlsx",
        codec=FakeCodec(rows=[{"Produit": "Pommes"}, {"Produit": "Poires"}]),
        classify=_classifier(client),
    )
    assert len(session.classified_products) == 2

    process_upload(
        session,
        b"...",
        "b.xlsx",
        codec=FakeCodec(rows=[{"Produit": "Pommes"}]),
        classify=_classifier(client),
    )
    assert session.file_name == "b.xlsx"
    assert [p.description for p in session.classified_products] == ["Pommes"]


def test_reset_clears_everything():
    session = ClassificationSession()
    session.start_upload("a.xlsx")
    session.fail("boom")

    session.reset()

    assert session == ClassificationSession()
    assert session.phase is SessionPhase.IDLE


@pytest.mark.parametrize(
    "action",
    [
        lambda s: s.complete([]),
        lambda s: s.begin_classification([]),
        lambda s: s.fail("nope"),
    ],
)
def test_illegal_transitions_from_idle(action):
    with pytest.raises(SessionStateError):
        action(ClassificationSession())


def test_export_requires_results():
    with pytest.raises(SessionStateError):
        export_results(ClassificationSession(), FakeCodec())
