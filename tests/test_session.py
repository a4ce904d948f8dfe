# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
BatchSession tests.

Statement shapes are checked against a recording executor double; round trips
against an in-memory SQLite database check that the generated SQL actually runs.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from batchalchemy import (
    GENERIC,
    ORACLE,
    ORACLE_LEGACY,
    SQLITE,
    BatchSession,
    BatchSettings,
    EntriesWithSequence,
    SqlExecutor,
    StateError,
)

from .sample_models import (
    Membership,
    MembershipKey,
    Person,
    SampleEntity,
    SampleSingleIdEntity,
    make_people,
    make_single_ids,
)


def _rows(connection, query: str):
    return connection.execute(query).fetchall()


# ============================================================================
# EMPTY INPUT AND STATE
# ============================================================================

class TestEmptyInput:
    """Bulk operations over no records never reach the executor."""

    @pytest.mark.parametrize(
        "operation",
        [
            lambda s: s.insert_all([]),
            lambda s: s.insert_all_in_batch([]),
            lambda s: s.insert_all_in_batch([], []),
            lambda s: s.insert_all_in_batch_with_sequence([EntriesWithSequence([], "id")]),
            lambda s: s.dialect_insert_all([], []),
            lambda s: s.insert_all_with_sequence_id([]),
            lambda s: s.insert_all_with_sequence_id([EntriesWithSequence([], "id")]),
            lambda s: s.update_all_in_batch([]),
            lambda s: s.delete_all_in_batch([], Person),
            lambda s: s.delete_all_in_batch([], Person, [], []),
            lambda s: s.delete_by_ids([], Person),
            lambda s: s.allocate_sequences({"person_seq": 0}),
        ],
    )
    def test_no_executor_call(self, mock_executor: Mock, operation):
        operation(BatchSession(mock_executor))
        mock_executor.execute.assert_not_called()
        mock_executor.execute_batch.assert_not_called()
        mock_executor.fetch_all.assert_not_called()

    def test_empty_input_without_executor(self):
        session = BatchSession(None)
        session.insert_all([])
        assert session.delete_by_ids([], Person) == 0
        assert session.allocate_sequences({"s": 0}) == {"s": []}

    def test_missing_executor_is_a_state_error(self):
        session = BatchSession(None)
        with pytest.raises(StateError):
            session.insert_all(make_people(1))
        with pytest.raises(RuntimeError):
            session.update(make_people(1)[0])


# ============================================================================
# STATEMENT SHAPES
# ============================================================================

class TestInsertShapes:

    def test_insert_all_multi_row(self, mock_executor: Mock):
        BatchSession(mock_executor, ORACLE).insert_all(make_single_ids(2))
        query, bindings = mock_executor.execute.call_args.args
        assert query.startswith("INSERT INTO sample_single_id_entity (id, first_name, desc) VALUES (?1, ?2, ?3), (?4")
        assert len(bindings) == 6

    def test_insert_all_fan_out(self, mock_executor: Mock):
        BatchSession(mock_executor, ORACLE_LEGACY).insert_all(make_single_ids(2))
        query = mock_executor.execute.call_args.args[0]
        assert query.startswith("INSERT ALL \n")
        assert query.count("INTO sample_single_id_entity") == 2

    def test_dialect_insert_all_mixes_types(self, mock_executor: Mock):
        BatchSession(mock_executor).dialect_insert_all(make_single_ids(1), [SampleEntity(name="x")])
        mock_executor.execute.assert_called_once()
        query = mock_executor.execute.call_args.args[0]
        assert "INTO sample_entity" in query and "INTO sample_single_id_entity" in query

    def test_insert_all_in_batch_plans_each_group(self, mock_executor: Mock):
        session = BatchSession(mock_executor, settings=BatchSettings(batch_size=2))
        session.insert_all_in_batch(make_single_ids(3), make_people(1))

        calls = mock_executor.execute_batch.call_args_list
        assert len(calls) == 3
        assert [len(call.args[1]) for call in calls] == [2, 1, 1]
        assert calls[0].args[0] == "INSERT INTO sample_single_id_entity (id, first_name, desc) VALUES (?, ?, ?)"
        assert calls[2].args[0].startswith("INSERT INTO person")

    def test_insert_all_in_batch_rewrite(self, mock_executor: Mock):
        session = BatchSession(mock_executor, settings=BatchSettings(rewritten_insert_size=2))
        session.insert_all_in_batch(make_single_ids(5), rewrite=True)

        templates = [call.args[0] for call in mock_executor.execute_batch.call_args_list]
        assert templates == [
            "INSERT INTO sample_single_id_entity (id, first_name, desc) VALUES (?, ?, ?), (?, ?, ?)",
            "INSERT INTO sample_single_id_entity (id, first_name, desc) VALUES (?, ?, ?)",
        ]

    def test_insert_all_in_batch_with_sequence(self, mock_executor: Mock):
        session = BatchSession(mock_executor, ORACLE)
        session.insert_all_in_batch_with_sequence([EntriesWithSequence(make_people(2), "id")])

        query, bindings_list = mock_executor.execute_batch.call_args.args
        assert query == "INSERT INTO person (id, first_name, surname, age) VALUES (person_seq.nextval, ?, ?, ?)"
        assert len(bindings_list) == 2


class TestInsertWithSequenceId:

    def test_single_group_draws_inside_statement(self, mock_executor: Mock):
        BatchSession(mock_executor, ORACLE).insert_all_with_sequence_id(
            [EntriesWithSequence(make_people(2), "id")]
        )
        mock_executor.fetch_all.assert_not_called()
        query = mock_executor.execute.call_args.args[0]
        assert query.count("person_seq.nextval") == 2

    def test_single_group_fan_out_uses_derived_table(self, mock_executor: Mock):
        BatchSession(mock_executor, ORACLE_LEGACY).insert_all_with_sequence_id(
            [EntriesWithSequence(make_people(2), "id")]
        )
        query = mock_executor.execute.call_args.args[0]
        assert query.startswith("INSERT INTO person (id, first_name, surname, age) SELECT person_seq.nextval, mt.*")

    def test_several_groups_reserve_then_fan_out(self, mock_executor: Mock):
        mock_executor.fetch_all.return_value = [(10, 90), (11, None)]
        people = make_people(2)
        entities = [SampleEntity(name="e")]

        BatchSession(mock_executor, ORACLE_LEGACY).insert_all_with_sequence_id(
            [EntriesWithSequence(people, "id"), EntriesWithSequence(entities, "key.id")]
        )

        assert [p.id for p in people] == [10, 11]
        assert entities[0].key.id == 90
        mock_executor.fetch_all.assert_called_once()
        mock_executor.execute.assert_called_once()
        query, bindings = mock_executor.execute.call_args.args
        assert query.startswith("INSERT ALL")
        assert bindings[1] == 10

    def test_allocation_blocks_reserve_then_multi_row(self, mock_executor: Mock):
        mock_executor.fetch_all.return_value = [(100,), (200,)]
        people = make_people(3)

        BatchSession(mock_executor, ORACLE).insert_all_with_sequence_id(
            [EntriesWithSequence(people, "id", allocation_size=2)]
        )

        assert [p.id for p in people] == [100, 101, 200]
        query = mock_executor.execute.call_args.args[0]
        assert query.startswith("INSERT INTO person (id, first_name, surname, age) VALUES (?1")

    def test_allocation_size_zero_behaves_as_one(self, mock_executor: Mock):
        BatchSession(mock_executor, GENERIC).insert_all_with_sequence_id(
            [EntriesWithSequence(make_people(1), "id", allocation_size=0)]
        )
        mock_executor.fetch_all.assert_not_called()
        assert "nextval('person_seq')" in mock_executor.execute.call_args.args[0]

    def test_allocate_sequences(self, mock_executor: Mock):
        mock_executor.fetch_all.return_value = [(5,), (6,)]
        assert BatchSession(mock_executor).allocate_sequences({"person_seq": 2}) == {"person_seq": [5, 6]}


class TestUpdateAndDeleteShapes:

    def test_update_returns_record(self, mock_executor: Mock):
        person = make_people(1)[0]
        assert BatchSession(mock_executor, ORACLE).update(person, ["age"]) is person
        assert mock_executor.execute.call_args.args[0] == "UPDATE person SET age = ?1 WHERE id = ?2"

    def test_update_generic_parenthesized(self, mock_executor: Mock):
        BatchSession(mock_executor).update(make_people(1)[0])
        assert mock_executor.execute.call_args.args[0] == (
            "UPDATE person SET (first_name = ?1, surname = ?2, age = ?3) WHERE id = ?4"
        )

    def test_update_all_in_batch(self, mock_executor: Mock):
        session = BatchSession(mock_executor, ORACLE, settings=BatchSettings(batch_size=10))
        session.update_all_in_batch(make_people(3), fields=["age"])
        query, bindings_list = mock_executor.execute_batch.call_args.args
        assert query == "UPDATE person SET age = ? WHERE id = ?"
        assert [b[2] for b in bindings_list] == [1, 2, 3]

    def test_delete_by_ids_returns_rowcount(self, mock_executor: Mock):
        mock_executor.execute.return_value = 2
        assert BatchSession(mock_executor).delete_by_ids([1, 2], Person) == 2
        assert mock_executor.execute.call_args.args[0] == "DELETE FROM person WHERE (id = ?1) OR (id = ?2)"

    def test_delete_all_in_batch_with_extra_groups(self, mock_executor: Mock):
        members = [Membership(key=MembershipKey(club_id=1, person_id=2))]
        BatchSession(mock_executor).delete_all_in_batch([1, 2], Person, [], members)

        queries = [c.args[0] for c in mock_executor.execute_batch.call_args_list]
        assert queries == [
            "DELETE FROM person WHERE id = ?",
            "DELETE FROM membership WHERE club_id = ? AND person_id = ?",
        ]
        assert mock_executor.execute_batch.call_args.args[1] == [{1: 1, 2: 2}]

    def test_executor_errors_propagate(self):
        executor = Mock(spec=SqlExecutor)
        executor.execute.side_effect = RuntimeError("constraint violated")
        with pytest.raises(RuntimeError, match="constraint violated"):
            BatchSession(executor).insert_all(make_people(1))


# ============================================================================
# SQLITE ROUND TRIPS
# ============================================================================

class TestSqliteRoundTrip:

    def test_insert_all(self, sqlite_connection, sqlite_executor):
        BatchSession(sqlite_executor, SQLITE).insert_all(make_people(3))
        assert _rows(sqlite_connection, "SELECT id, first_name, surname, age FROM person ORDER BY id") == [
            (1, "first1", "last1", 20),
            (2, "first2", "last2", 21),
            (3, "first3", "last3", 22),
        ]

    @pytest.mark.parametrize("rewrite", [False, True])
    def test_insert_all_in_batch(self, sqlite_connection, sqlite_executor, rewrite):
        settings = BatchSettings(batch_size=4, rewritten_insert_size=3)
        BatchSession(sqlite_executor, SQLITE, settings).insert_all_in_batch(make_people(10), rewrite=rewrite)
        assert _rows(sqlite_connection, "SELECT count(*) FROM person") == [(10,)]
        assert _rows(sqlite_connection, "SELECT max(id) FROM person") == [(10,)]

    def test_embedded_key_round_trip(self, sqlite_connection, sqlite_executor):
        session = BatchSession(sqlite_executor, SQLITE)
        members = [
            Membership(key=MembershipKey(club_id=1, person_id=1), role="owner"),
            Membership(key=MembershipKey(club_id=1, person_id=2), role="member"),
            Membership(key=MembershipKey(club_id=2, person_id=1), role="member"),
        ]
        session.insert_all_in_batch(members)

        members[1].role = "admin"
        session.update(members[1], ["role"])
        assert _rows(sqlite_connection, "SELECT role FROM membership WHERE club_id = 1 AND person_id = 2") == [
            ("admin",)
        ]

        session.delete_all_in_batch([MembershipKey(club_id=1, person_id=1), (2, 1)], Membership)
        assert _rows(sqlite_connection, "SELECT club_id, person_id FROM membership") == [(1, 2)]

    def test_update_all_in_batch(self, sqlite_connection, sqlite_executor):
        session = BatchSession(sqlite_executor, SQLITE, BatchSettings(batch_size=2))
        people = make_people(3)
        session.insert_all(people)
        for person in people:
            person.age = 99
            person.lastName = "changed"
        session.update_all_in_batch(people, fields=["age"])
        assert _rows(sqlite_connection, "SELECT DISTINCT age, surname FROM person ORDER BY surname") == [
            (99, "last1"), (99, "last2"), (99, "last3"),
        ]

    def test_delete_by_ids(self, sqlite_connection, sqlite_executor):
        session = BatchSession(sqlite_executor, SQLITE)
        session.insert_all(make_people(4))
        assert session.delete_by_ids([2, 4], Person) == 2
        assert _rows(sqlite_connection, "SELECT id FROM person ORDER BY id") == [(1,), (3,)]

    def test_delete_all_in_batch_across_tables(self, sqlite_connection, sqlite_executor):
        session = BatchSession(sqlite_executor, SQLITE, BatchSettings(batch_size=2))
        people = make_people(3)
        members = [
            Membership(key=MembershipKey(club_id=1, person_id=1), role="owner"),
            Membership(key=MembershipKey(club_id=1, person_id=3), role="member"),
        ]
        session.insert_all_in_batch(people, members)

        session.delete_all_in_batch([1, 3], Person, members)

        assert _rows(sqlite_connection, "SELECT id FROM person") == [(2,)]
        assert _rows(sqlite_connection, "SELECT count(*) FROM membership") == [(0,)]

    def test_session_does_not_commit(self, sqlite_connection, sqlite_executor):
        BatchSession(sqlite_executor, SQLITE).insert_all(make_people(1))
        assert sqlite_connection.in_transaction
        sqlite_connection.rollback()
        assert _rows(sqlite_connection, "SELECT count(*) FROM person") == [(0,)]
