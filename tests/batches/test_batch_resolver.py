from coaching_analytics.batches.resolver import BatchJoinResolver

MID = "m1"


def test_resolves_classes_and_students_of_a_batch(world):
    scope = BatchJoinResolver(world.students).resolve_scope(MID, "Batch-7")

    assert scope.batch == "Batch-7"
    assert scope.class_ids == frozenset({"C1", "C2"})
    assert scope.student_ids == frozenset({"S1", "S2", "S4"})


def test_input_is_normalized_before_lookup(world):
    scope = BatchJoinResolver(world.students).resolve_scope(MID, " Batch - 7 ")
    assert scope.student_ids == frozenset({"S1", "S2", "S4"})


def test_lookup_is_case_sensitive(world):
    assert BatchJoinResolver(world.students).resolve_scope(MID, "batch-7").is_empty


def test_unknown_batch_and_other_tenant_resolve_empty(world):
    resolver = BatchJoinResolver(world.students)
    assert resolver.resolve_scope(MID, "Batch-99").is_empty
    assert resolver.resolve_scope("other", "Batch-7").is_empty


def test_students_without_class_do_not_contribute_class_ids(world):
    resolver = BatchJoinResolver(world.students)
    assert resolver.resolve_student_ids(MID, "Batch-9") == frozenset({"S5"})
    assert resolver.resolve_class_ids(MID, "Batch-9") == frozenset()
