from collections import deque
from Failures import TopologyError

#a class that has various functionality to navigate the graph of a stream graph.
#it splits the graph into networks and walks each network from its outlet upstream
class StreamGraphNavigator (object):

    def __init__(self, streamGraph, debug = False):
        self.streamGraph = streamGraph
        self.debug = debug

    def getNetworks (self):
        """ Split the graph into connected components.

        Components are ordered by their lowest cat, segments within a component are sorted by cat.

        :return: A list of lists of segments. """
        parent = {}

        def find (cat):
            root = cat
            while parent[root] != root:
                root = parent[root]
            #path compression
            while parent[cat] != root:
                parent[cat], cat = root, parent[cat]
            return root

        def union (catA, catB):
            rootA = find(catA)
            rootB = find(catB)
            if rootA != rootB:
                #keep the lower cat as root so component order follows discovery order
                parent[max(rootA, rootB)] = min(rootA, rootB)

        segments = self.streamGraph.getSortedSegments()
        for segment in segments:
            parent[segment.cat] = segment.cat

        for node in self.streamGraph.nodes:
            nodeSegments = [neighbor.segment for neighbor in node.neighbors]
            for other in nodeSegments[1:]:
                union(nodeSegments[0].cat, other.cat)

        components = {}
        for segment in segments:
            root = find(segment.cat)
            if root not in components:
                components[root] = []
            components[root].append(segment)

        return [components[root] for root in sorted(components)]

    def collectUpstreamSegments (self, segment):
        """ Depth first walk upstream of segment (inclusive). Lower cats are followed first.

        :return: The segments in visiting order. """
        collected = []
        stack = [segment]
        seen = set()
        while len(stack) > 0:
            thisSegment = stack.pop()
            if thisSegment.cat in seen:
                continue
            seen.add(thisSegment.cat)
            collected.append(thisSegment)
            #reverse the list. We want the lowest cat to be popped first
            stack.extend(reversed(thisSegment.getUpstreamSegments()))
        return collected

    def assignNetworkIDs (self):
        """ Set netID and rid of every segment.

        netIDs count from 1 in component order. rids count from 0 over the whole graph,
        network after network, each network walked downstream first from its outlet.

        :return: The number of networks. """
        networks = self.getNetworks()
        nextRid = 0
        for netIndex, network in enumerate(networks):
            netID = netIndex + 1
            ordered = []
            seen = set()
            outlets = [segment for segment in network if segment.isOutlet()]
            for outlet in outlets:
                for segment in self.collectUpstreamSegments(outlet):
                    if segment.cat not in seen:
                        seen.add(segment.cat)
                        ordered.append(segment)
            #anything not reachable from an outlet is inconsistent, calcUpstreamDistances reports it
            for segment in network:
                if segment.cat not in seen:
                    ordered.append(segment)

            for segment in ordered:
                segment.netID = netID
                segment.rid = nextRid
                nextRid += 1

        if self.debug:
            print("Assigned " + str(nextRid) + " rids in " + str(len(networks)) + " networks")
        return len(networks)

    def calcUpstreamDistances (self):
        """ Set upDist of every segment: the flow distance from its downstream end to the outlet of its network.

        Requires netIDs (see assignNetworkIDs). """
        byNetwork = {}
        for segment in self.streamGraph.getSortedSegments():
            if segment.netID is None:
                raise TopologyError("segment " + str(segment.cat) + " has no netID")
            byNetwork.setdefault(segment.netID, []).append(segment)

        for netID in sorted(byNetwork):
            network = byNetwork[netID]
            outlets = [segment for segment in network if segment.isOutlet()]
            if len(outlets) != 1:
                raise TopologyError("network " + str(netID) + " has " + str(len(outlets)) + " outlets")

            outlet = outlets[0]
            outlet.upDist = 0.0
            visited = set([outlet.cat])
            queue = deque([outlet])
            while len(queue) > 0:
                current = queue.popleft()
                for upstream in current.getUpstreamSegments():
                    if upstream.cat in visited:
                        raise TopologyError("cycle in network " + str(netID) + " at segment " + str(upstream.cat))
                    visited.add(upstream.cat)
                    upstream.upDist = current.upDist + current.length
                    queue.append(upstream)

            if len(visited) != len(network):
                raise TopologyError("network " + str(netID) + " has " + str(len(network) - len(visited)) + " segments that do not drain to its outlet")
