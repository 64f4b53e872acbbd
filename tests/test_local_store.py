from __future__ import annotations

from bizdocs_sdk.local_store import LocalDocumentStore, is_local_id


def test_upsert_assigns_local_id_and_timestamps(store: LocalDocumentStore) -> None:
    saved = store.upsert("salesInvoices", {"invoiceNumber": "INV-1"})

    assert is_local_id(saved["id"])
    assert saved["createdAt"]
    assert store.get("salesInvoices", saved["id"])["invoiceNumber"] == "INV-1"


def test_upsert_replaces_existing_snapshot(store: LocalDocumentStore) -> None:
    saved = store.upsert("salesInvoices", {"invoiceNumber": "INV-1"})
    store.upsert("salesInvoices", {"invoiceNumber": "INV-2"}, record_id=saved["id"])

    rows = store.list("salesInvoices")
    assert len(rows) == 1
    assert rows[0]["invoiceNumber"] == "INV-2"
    assert rows[0]["updatedAt"]


def test_keys_are_separate(store: LocalDocumentStore) -> None:
    store.upsert("salesInvoices", {"invoiceNumber": "INV-1"})
    assert store.list("salesReturns") == []


def test_delete(store: LocalDocumentStore) -> None:
    saved = store.upsert("journalEntries", {"entryNumber": "JE-1"})
    assert store.delete("journalEntries", saved["id"]) is True
    assert store.delete("journalEntries", saved["id"]) is False
    assert store.list("journalEntries") == []


def test_corrupt_file_reads_as_empty(store: LocalDocumentStore) -> None:
    store.upsert("salesInvoices", {"invoiceNumber": "INV-1"})
    (store.base_dir / "salesInvoices.json").write_text("{not json", encoding="utf-8")
    assert store.list("salesInvoices") == []


def test_sequences_are_persisted_per_scope(store: LocalDocumentStore) -> None:
    assert store.next_sequence("sales-invoices:1") == 1
    assert store.next_sequence("sales-invoices:1") == 2
    assert store.next_sequence("journal-entries:1") == 1

    reopened = LocalDocumentStore(base_dir=store.base_dir)
    assert reopened.next_sequence("sales-invoices:1") == 3


def test_is_local_id() -> None:
    assert is_local_id("local-abc")
    assert not is_local_id("42")
    assert not is_local_id(None)
