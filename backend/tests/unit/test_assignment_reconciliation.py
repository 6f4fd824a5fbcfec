# backend/tests/unit/test_assignment_reconciliation.py

from rehome_ops.services.schedule_editor import AssignmentDelta, reconcile_date_assignment


class TestReconcileDateAssignment:
    def test_adds_and_removes(self):
        delta = reconcile_date_assignment({"A", "B"}, {"B", "C"})
        assert delta == AssignmentDelta(to_add=("C",), to_remove=("A",))

    def test_applying_delta_then_reconciling_is_a_no_op(self):
        current = {"Amsterdam", "Utrecht"}
        desired = ["Utrecht", "Rotterdam", "Breda"]
        delta = reconcile_date_assignment(current, desired)
        applied = (current - set(delta.to_remove)) | set(delta.to_add)
        assert reconcile_date_assignment(applied, desired).is_empty

    def test_output_is_sorted_and_deduplicated(self):
        delta = reconcile_date_assignment([], ["Zwolle", "Breda", "Zwolle", " Breda "])
        assert delta.to_add == ("Breda", "Zwolle")
        assert delta.to_remove == ()

    def test_empty_selection_removes_everything(self):
        delta = reconcile_date_assignment(["Amsterdam", "Utrecht"], [])
        assert delta.to_remove == ("Amsterdam", "Utrecht")
        assert delta.to_add == ()
