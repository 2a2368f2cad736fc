"""
Graph view of a project's activity dependencies using NetworkX.

Edges point from prerequisite to dependent (to_activity_id -> from_activity_id),
the order in which work flows. The graph may contain cycles; nothing here
requires it to be acyclic.
"""

import networkx as nx

from portfolio.exceptions import NotFoundError
from portfolio.schemas import ActivityLinks, ProjectDetails


def build_activity_graph(details: ProjectDetails) -> nx.DiGraph:
    """
    Build a DiGraph from a project's activities and dependencies.

    Nodes are activity ids; project activities carry their record under
    the "activity" attribute. Endpoints outside the project become bare
    nodes so that no edge is dropped.
    """
    graph = nx.DiGraph()

    for activity in details.activities:
        graph.add_node(activity.id, activity=activity)

    for dep in details.dependencies:
        graph.add_edge(dep.to_activity_id, dep.from_activity_id, id=dep.id, type=dep.type)

    return graph


def activity_links(details: ProjectDetails, activity_id: str) -> ActivityLinks:
    """Direct prerequisites and dependents of one project activity."""
    graph = build_activity_graph(details)
    if "activity" not in graph.nodes.get(activity_id, {}):
        raise NotFoundError("Activity", activity_id)

    def resolve(node_ids):
        found, unresolved = [], []
        for node_id in node_ids:
            activity = graph.nodes[node_id].get("activity")
            if activity is None:
                unresolved.append(node_id)
            else:
                found.append(activity)
        return found, unresolved

    depends_on, unresolved_before = resolve(graph.predecessors(activity_id))
    required_by, unresolved_after = resolve(graph.successors(activity_id))

    return ActivityLinks(
        activity_id=activity_id,
        depends_on=depends_on,
        required_by=required_by,
        unresolved_ids=sorted(set(unresolved_before + unresolved_after)),
    )
