import unittest

from pomodoro import (
    StateNode,
    Transition,
    Workflow,
    WorkflowContext,
    WorkflowDefinitionError,
)


def _record(trace: list[str], label: str):
    def action(ctx, ports) -> None:
        trace.append(label)

    return action


class WorkflowEngineTests(unittest.TestCase):
    def test_rejects_unknown_targets_and_initial_state(self) -> None:
        config = {"a": StateNode(on={"GO": (Transition(target="missing"),)})}

        with self.assertRaises(WorkflowDefinitionError):
            Workflow(WorkflowContext(), object(), config, initial="a")

        with self.assertRaises(WorkflowDefinitionError):
            Workflow(WorkflowContext(), object(), {"a": StateNode()}, initial="b")

    def test_unmatched_event_is_ignored(self) -> None:
        trace: list[str] = []
        config = {"a": StateNode(on_enter=(_record(trace, "enter a"),))}
        workflow = Workflow(WorkflowContext(), object(), config, initial="a")
        workflow.start()

        self.assertFalse(workflow.dispatch("NOPE"))
        self.assertEqual("a", workflow.current)
        self.assertEqual(["enter a"], trace)

    def test_first_passing_guard_wins_and_actions_run_before_entry(self) -> None:
        trace: list[str] = []
        config = {
            "a": StateNode(
                on={
                    "GO": (
                        Transition(target="b", guard=lambda ctx: False),
                        Transition(target="c", actions=(_record(trace, "edge"),)),
                        Transition(target="b"),
                    )
                }
            ),
            "b": StateNode(on_enter=(_record(trace, "enter b"),)),
            "c": StateNode(on_enter=(_record(trace, "enter c"),)),
        }
        workflow = Workflow(WorkflowContext(), object(), config, initial="a")

        self.assertTrue(workflow.dispatch("GO"))
        self.assertEqual("c", workflow.current)
        self.assertEqual(["edge", "enter c"], trace)

    def test_always_transitions_run_to_quiescence(self) -> None:
        config = {
            "a": StateNode(on={"GO": (Transition(target="b"),)}),
            "b": StateNode(always=(Transition(target="c"),)),
            "c": StateNode(always=(Transition(target="d", guard=lambda ctx: ctx.running),)),
            "d": StateNode(),
        }
        ctx = WorkflowContext(running=True)
        workflow = Workflow(ctx, object(), config, initial="a")

        workflow.dispatch("GO")

        self.assertEqual("d", workflow.current)

    def test_internal_transition_reevaluates_always_without_reentry(self) -> None:
        trace: list[str] = []

        def mark(ctx, ports) -> None:
            ctx.completion_done = True

        config = {
            "a": StateNode(
                on_enter=(_record(trace, "enter a"),),
                on={"MARK": (Transition(target=None, actions=(mark,)),)},
                always=(Transition(target="b", guard=lambda ctx: ctx.completion_done),),
            ),
            "b": StateNode(on_enter=(_record(trace, "enter b"),)),
        }
        workflow = Workflow(WorkflowContext(), object(), config, initial="a")
        workflow.start()

        self.assertEqual("a", workflow.current)
        workflow.dispatch("MARK")

        self.assertEqual("b", workflow.current)
        self.assertEqual(["enter a", "enter b"], trace)

    def test_runaway_always_chain_raises(self) -> None:
        config = {
            "a": StateNode(always=(Transition(target="b"),)),
            "b": StateNode(always=(Transition(target="a"),)),
        }
        workflow = Workflow(WorkflowContext(), object(), config, initial="a")

        with self.assertRaises(WorkflowDefinitionError):
            workflow.start()

    def test_enter_runs_entry_actions_of_the_target(self) -> None:
        trace: list[str] = []
        config = {
            "a": StateNode(),
            "b": StateNode(on_enter=(_record(trace, "enter b"),)),
        }
        workflow = Workflow(WorkflowContext(), object(), config, initial="a")

        workflow.enter("b")

        self.assertEqual("b", workflow.current)
        self.assertEqual(["enter b"], trace)
        with self.assertRaises(WorkflowDefinitionError):
            workflow.enter("zzz")


if __name__ == "__main__":
    unittest.main()
