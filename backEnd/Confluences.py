import math
from StreamGraphNavigator import StreamGraphNavigator
from Failures import TopologyError

#correction adds every auxiliary segment a node needs in one pass. More passes signal a bug
MAX_CORRECTION_PASSES = 10

def getComplexConfluences (graph):
    """ Nodes where more than two segments join, in node order. """
    return [node for node in graph.nodes if node.inflowDegree() > 2]

def checkComplexConfluences (graph):
    """ Does the graph contain any complex confluence? Does not modify the graph. """
    return len(getComplexConfluences(graph)) > 0

def correctComplexConfluences (graph):
    """ Restructure every complex confluence into binary merges.

    For a node with k inflows, k - 2 zero length auxiliary segments are added. Each one joins
    two inflows in a new node placed at the junction and drains into the junction.
    The input graph is not modified.

    :return: (corrected graph, whether further correction is needed) """
    corrected = graph.copy()
    navigator = StreamGraphNavigator(corrected)
    networksBefore = len(navigator.getNetworks())
    lengthBefore = corrected.totalLength()

    added = 0
    for node in getComplexConfluences(corrected):
        inflows = node.getSortedUpstreamBranches()
        while len(inflows) > 2:
            first = inflows.pop(0)
            second = inflows.pop(0)
            auxNode = corrected.addNode(node.position)
            corrected.reconnectDownstream(first, auxNode)
            corrected.reconnectDownstream(second, auxNode)
            auxSegment = corrected.addSegment(auxNode, node, [node.position, node.position], length = 0.0, auxiliary = True)
            inflows.append(auxSegment)
            added += 1

    if len(navigator.getNetworks()) != networksBefore:
        raise TopologyError("correcting complex confluences changed the number of networks from " + str(networksBefore))
    if not math.isclose(corrected.totalLength(), lengthBefore, rel_tol = 1e-9, abs_tol = 1e-9):
        raise TopologyError("correcting complex confluences changed the total stream length")

    if __debug__:
        print("Added " + str(added) + " auxiliary segments at complex confluences")

    return corrected, checkComplexConfluences(corrected)

def resolveComplexConfluences (graph, maxPasses = MAX_CORRECTION_PASSES):
    """ Correct until no complex confluence is left.

    :return: The corrected graph. """
    needsCorrection = checkComplexConfluences(graph)
    passes = 0
    while needsCorrection:
        if passes >= maxPasses:
            raise TopologyError("complex confluences remain after " + str(maxPasses) + " correction passes")
        graph, needsCorrection = correctComplexConfluences(graph)
        passes += 1
    return graph
