"""Unit tests for critical path and what-if analysis."""
import pytest

from src.cpm.analysis import (
    analyze_schedule,
    analyze_critical_path,
    analyze_task_impact,
    print_critical_path_report,
)
from src.cpm.engine import compute_schedule
from src.cpm.models import Task
from src.cpm.network import CyclicDependencyError


class TestAnalyzeCriticalPath:
    """Test slack categorisation."""

    def test_critical_and_near_critical(self, slack_tasks):
        result = analyze_critical_path(slack_tasks, near_critical_threshold=3)
        assert [t.id for t in result.critical_path] == ['start', 'long', 'end']
        assert [t.id for t in result.near_critical_tasks] == ['short']
        assert result.project_duration == 7
        assert result.total_tasks == 5

    def test_slack_distribution(self, slack_tasks):
        result = analyze_critical_path(slack_tasks, near_critical_threshold=3)
        assert result.slack_distribution == {
            '0 (critical)': 3,
            '<= 3 (near-critical)': 1,
            '<= 6': 1,
        }

    def test_near_critical_sorted_by_slack(self, slack_tasks):
        result = analyze_critical_path(slack_tasks, near_critical_threshold=10)
        assert [t.id for t in result.near_critical_tasks] == ['short', 'docs']

    def test_risk_summary(self, slack_tasks):
        result = analyze_critical_path(slack_tasks, near_critical_threshold=3)
        assert result.get_critical_path_length() == 3
        assert result.get_risk_summary() == '3 critical tasks, 1 near-critical (slack <= 3)'

    def test_reports_unresolved(self):
        tasks = [Task(id='a', title='a', duration=1, dependencies=('gone',))]
        result = analyze_critical_path(tasks, missing_dependencies='ignore')
        assert result.unresolved_dependencies == {'a': ['gone']}

    def test_cycle_propagates(self):
        tasks = [
            Task(id='a', title='a', duration=1, dependencies=('b',)),
            Task(id='b', title='b', duration=1, dependencies=('a',)),
        ]
        with pytest.raises(CyclicDependencyError):
            analyze_critical_path(tasks)

    def test_analyze_existing_schedule(self, example_tasks):
        result = analyze_schedule(compute_schedule(example_tasks), near_critical_threshold=1)
        assert result.near_critical_tasks == []
        assert result.slack_distribution == {'0 (critical)': 4}


class TestAnalyzeTaskImpact:
    """Test single-task what-if analysis."""

    def test_critical_task_slips_project(self, example_tasks):
        impact = analyze_task_impact(example_tasks, 'B', 2)
        assert impact.new_duration == 4
        assert impact.original_project_duration == 8
        assert impact.new_project_duration == 10
        assert impact.slip == 2
        assert impact.affected_task_ids == ['B', 'D']
        assert impact.new_critical_path == ['A', 'B', 'D']
        assert impact.critical_path_changed
        assert impact.get_slip_summary() == 'Project finish slips by 2'

    def test_slack_absorbs_delay(self, slack_tasks):
        impact = analyze_task_impact(slack_tasks, 'short', 2)
        assert impact.slip == 0
        assert impact.affected_task_ids == ['short']
        assert not impact.critical_path_changed
        assert impact.get_slip_summary() == 'No impact on project finish'

    def test_shortening_clamps_at_zero(self, slack_tasks):
        impact = analyze_task_impact(slack_tasks, 'long', -100)
        assert impact.new_duration == 0
        assert impact.slip < 0
        assert impact.get_slip_summary().startswith('Project finish improves by')

    def test_input_unchanged(self, example_tasks):
        analyze_task_impact(example_tasks, 'A', 5)
        assert example_tasks[0].duration == 3

    def test_unknown_task(self, example_tasks):
        with pytest.raises(KeyError):
            analyze_task_impact(example_tasks, 'Z', 1)


class TestReport:
    """Test the text report."""

    def test_report_output(self, slack_tasks, capsys):
        print_critical_path_report(analyze_critical_path(slack_tasks, near_critical_threshold=3), title='Demo')
        out = capsys.readouterr().out
        assert 'CRITICAL PATH ANALYSIS REPORT' in out
        assert 'Demo' in out
        assert 'start -> long -> end' in out
        assert 'Near-Critical Tasks (first 10)' in out

    def test_empty_report(self, capsys):
        print_critical_path_report(analyze_critical_path([]))
        out = capsys.readouterr().out
        assert 'Total Tasks: 0' in out
