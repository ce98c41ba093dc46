import math
import unittest
from StreamGraph import StreamGraph
from StreamGraphNavigator import StreamGraphNavigator
from Confluences import getComplexConfluences, checkComplexConfluences, correctComplexConfluences, resolveComplexConfluences
from Failures import TopologyError

def buildStar (numInflows):
    """ numInflows sources draining into one junction at (0,0), which drains south. """
    streamGraph = StreamGraph()
    junction = streamGraph.addNode((0,0))
    for i in range(numInflows):
        position = (i - numInflows // 2, 5)
        source = streamGraph.addNode(position)
        streamGraph.addSegment(source, junction, [position, (0,0)])
    outlet = streamGraph.addNode((0,-5))
    streamGraph.addSegment(junction, outlet, [(0,0), (0,-5)])
    return streamGraph

class ConfluenceTests (unittest.TestCase):

    def test_check (self):
        self.assertFalse(checkComplexConfluences(buildStar(2)))
        self.assertTrue(checkComplexConfluences(buildStar(3)))
        self.assertEqual(len(getComplexConfluences(buildStar(4))), 1)

    def test_threeInflows (self):
        streamGraph = buildStar(3)
        corrected, needsMore = correctComplexConfluences(streamGraph)

        self.assertFalse(needsMore)
        auxiliary = [s for s in corrected.segments.values() if s.auxiliary]
        self.assertEqual(len(auxiliary), 1)
        self.assertEqual(auxiliary[0].length, 0)
        self.assertEqual(auxiliary[0].cat, 5)
        self.assertTrue(math.isclose(corrected.totalLength(), streamGraph.totalLength()))
        #the two lowest cats merge first
        self.assertEqual([s.cat for s in auxiliary[0].getUpstreamSegments()], [1, 2])
        self.assertIs(corrected.segments[3].getDownstreamSegment(), corrected.segments[4])

    def test_inputUnchanged (self):
        streamGraph = buildStar(3)
        correctComplexConfluences(streamGraph)
        self.assertEqual(len(streamGraph.segments), 4)
        self.assertTrue(checkComplexConfluences(streamGraph))

    def test_fourInflows (self):
        corrected, needsMore = correctComplexConfluences(buildStar(4))
        self.assertFalse(needsMore)
        self.assertEqual(len([s for s in corrected.segments.values() if s.auxiliary]), 2)
        for node in corrected.nodes:
            self.assertLessEqual(node.inflowDegree(), 2)

    def test_resultIsTree (self):
        corrected = resolveComplexConfluences(buildStar(5))
        navigator = StreamGraphNavigator(corrected)
        self.assertEqual(navigator.assignNetworkIDs(), 1)
        self.assertEqual(len(corrected.getOutletSegments()), 1)
        for segment in corrected.segments.values():
            self.assertIn(len(segment.getUpstreamSegments()), (0, 2))
        navigator.calcUpstreamDistances()

    def test_resolveWithoutComplexConfluences (self):
        streamGraph = buildStar(2)
        self.assertIs(resolveComplexConfluences(streamGraph), streamGraph)

    def test_resolveGivesUp (self):
        with self.assertRaises(TopologyError):
            resolveComplexConfluences(buildStar(3), maxPasses = 0)
