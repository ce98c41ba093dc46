import math
import unittest
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import Helpers
from StreamGraph import StreamGraph
from StreamGraphNavigator import StreamGraphNavigator
from SiteLayer import SiteLayer, SitePoint
from Failures import TopologyError

#two tributaries joining at (1,1), draining south to an outlet at (1,0)
def buildY ():
    streamGraph = StreamGraph()
    node1 = streamGraph.addNode((0,2))
    node2 = streamGraph.addNode((2,2))
    node3 = streamGraph.addNode((1,1))
    node4 = streamGraph.addNode((1,0))
    streamGraph.addSegment(node1, node3, [(0,2), (1,1)])
    streamGraph.addSegment(node2, node3, [(2,2), (1,1)])
    streamGraph.addSegment(node3, node4, [(1,1), (1,0)])
    return streamGraph

def addLine (streamGraph, x, top, bottom):
    upNode = streamGraph.addNode((x, top))
    downNode = streamGraph.addNode((x, bottom))
    return streamGraph.addSegment(upNode, downNode, [(x, top), (x, bottom)])

class StreamGraphTests (unittest.TestCase):

    def test_addSegmentDrawsNextCat (self):
        streamGraph = buildY()
        self.assertEqual(sorted(streamGraph.segments), [1, 2, 3])
        segment = addLine(streamGraph, 5, 2, 0)
        self.assertEqual(segment.cat, 4)
        self.assertEqual(segment.stream, 4)
        self.assertEqual(segment.length, 2)

    def test_neighbors (self):
        streamGraph = buildY()
        outlet = streamGraph.segments[3]
        self.assertTrue(outlet.isOutlet())
        self.assertFalse(outlet.isSource())
        self.assertEqual([s.cat for s in outlet.getUpstreamSegments()], [1, 2])
        self.assertIs(streamGraph.segments[1].getDownstreamSegment(), outlet)
        self.assertIsNone(outlet.getDownstreamSegment())
        self.assertEqual(outlet.upStreamNode.inflowDegree(), 2)
        self.assertEqual(len(streamGraph.getSinks()), 1)

    def test_removeSegment (self):
        streamGraph = buildY()
        segment = streamGraph.segments[2]
        streamGraph.removeSegment(segment)
        self.assertNotIn(2, streamGraph.segments)
        self.assertEqual(streamGraph.segments[3].upStreamNode.inflowDegree(), 1)
        self.assertEqual(segment.upStreamNode.numNeighbors(), 0)

    def test_copyIsIndependent (self):
        streamGraph = buildY()
        copied = streamGraph.copy()
        copied.removeSegment(copied.segments[1])
        copied.segments[3].rid = 7

        self.assertEqual(len(streamGraph.segments), 3)
        self.assertIsNone(streamGraph.segments[3].rid)
        self.assertEqual(len(copied.nodes), len(streamGraph.nodes))
        self.assertEqual(copied.segments[3].upStreamNode.inflowDegree(), 1)

    def test_copyRenumber (self):
        streamGraph = buildY()
        streamGraph.removeSegment(streamGraph.segments[1])
        copied = streamGraph.copy(renumber = True)
        self.assertEqual(sorted(copied.segments), [1, 2])
        self.assertEqual(copied.segments[2].points, [(1,1), (1,0)])

    def test_copyFiltersNetIDs (self):
        streamGraph = buildY()
        addLine(streamGraph, 5, 2, 0)
        StreamGraphNavigator(streamGraph).assignNetworkIDs()

        copied = streamGraph.copy(netIDs = {2})
        self.assertEqual(sorted(copied.segments), [4])
        self.assertEqual(len(copied.nodes), 2)
        self.assertEqual(copied.getNetIDs(), [2])

    def test_totalLength (self):
        streamGraph = buildY()
        self.assertAlmostEqual(streamGraph.totalLength(), 2 * math.sqrt(2) + 1)

    def test_attributeTableRoundsOnlyOnOutput (self):
        streamGraph = buildY()
        navigator = StreamGraphNavigator(streamGraph)
        navigator.assignNetworkIDs()
        navigator.calcUpstreamDistances()

        table = streamGraph.getAttributeTable()
        self.assertEqual([row["cat"] for row in table], [1, 2, 3])
        self.assertEqual(table[0]["Length"], 1.41)
        self.assertEqual(streamGraph.segments[1].length, math.sqrt(2))
        self.assertEqual(table[2]["upDist"], 0)

    def test_getGeoJSON (self):
        geojson = buildY().getGeoJSON()
        self.assertEqual(geojson["type"], "FeatureCollection")
        self.assertEqual(len(geojson["features"]), 3)
        self.assertEqual(geojson["features"][2]["geometry"]["coordinates"], [[1,1], [1,0]])

    def test_visualizeReturnsFigure (self):
        streamGraph = buildY()
        site = SitePoint(1, (0.2, 1.9))
        site.position = (0.5, 1.5)
        sites = SiteLayer("sites", [site, SitePoint(2, (1, 0.5))])
        figure = streamGraph.visualize(siteLayers = [sites], showSegInfo = True, show = False)
        self.assertIsNotNone(figure)
        plt.close(figure)

class GraphNavigatorTests (unittest.TestCase):

    def test_getNetworks (self):
        streamGraph = buildY()
        addLine(streamGraph, 5, 2, 0)
        networks = StreamGraphNavigator(streamGraph).getNetworks()
        self.assertEqual([[s.cat for s in network] for network in networks], [[1, 2, 3], [4]])

    def test_assignNetworkIDs (self):
        streamGraph = buildY()
        addLine(streamGraph, 5, 2, 0)
        numNetworks = StreamGraphNavigator(streamGraph).assignNetworkIDs()

        self.assertEqual(numNetworks, 2)
        self.assertEqual([streamGraph.segments[cat].netID for cat in (1, 2, 3, 4)], [1, 1, 1, 2])
        #downstream first, lower cats first, rids continue over networks
        self.assertEqual([streamGraph.segments[cat].rid for cat in (3, 1, 2, 4)], [0, 1, 2, 3])

    def test_ridsAreStable (self):
        first = buildY()
        second = buildY()
        StreamGraphNavigator(first).assignNetworkIDs()
        StreamGraphNavigator(second).assignNetworkIDs()
        self.assertEqual([s.rid for s in first.getSortedSegments()], [s.rid for s in second.getSortedSegments()])

    def test_calcUpstreamDistances (self):
        streamGraph = buildY()
        navigator = StreamGraphNavigator(streamGraph)
        navigator.assignNetworkIDs()
        navigator.calcUpstreamDistances()

        self.assertEqual(streamGraph.segments[3].upDist, 0)
        self.assertEqual(streamGraph.segments[1].upDist, 1)
        self.assertEqual(streamGraph.segments[2].upDist, 1)

    def test_upDistNonIncreasingDownstream (self):
        streamGraph = buildY()
        junction = streamGraph.segments[1].upStreamNode
        source = streamGraph.addNode((-1,3))
        streamGraph.addSegment(source, junction, [(-1,3), (0,2)])
        navigator = StreamGraphNavigator(streamGraph)
        navigator.assignNetworkIDs()
        navigator.calcUpstreamDistances()

        for segment in streamGraph.segments.values():
            downstream = segment.getDownstreamSegment()
            if downstream is not None:
                self.assertGreaterEqual(segment.upDist, downstream.upDist)
        self.assertAlmostEqual(streamGraph.segments[4].upDist, 1 + math.sqrt(2))

    def test_multipleOutletsRaise (self):
        streamGraph = StreamGraph()
        top = streamGraph.addNode((0,2))
        left = streamGraph.addNode((-1,0))
        right = streamGraph.addNode((1,0))
        streamGraph.addSegment(top, left, [(0,2), (-1,0)])
        streamGraph.addSegment(top, right, [(0,2), (1,0)])
        navigator = StreamGraphNavigator(streamGraph)
        navigator.assignNetworkIDs()

        with self.assertRaises(TopologyError):
            navigator.calcUpstreamDistances()

    def test_missingNetIDsRaise (self):
        with self.assertRaises(TopologyError):
            StreamGraphNavigator(buildY()).calcUpstreamDistances()

class HelperTests (unittest.TestCase):

    def test_projectOntoPolyline (self):
        point, distance, along = Helpers.projectOntoPolyline([(0,10), (0,0), (10,0)], 3, 4)
        self.assertEqual(point, (0, 4))
        self.assertEqual(distance, 3)
        self.assertEqual(along, 6)

    def test_projectPrefersUpstreamPart (self):
        #(5,5) is equally close to both legs
        point, distance, along = Helpers.projectOntoPolyline([(0,5), (5,0), (10,5)], 5, 5)
        self.assertEqual(point, (2.5, 2.5))
        self.assertAlmostEqual(along, math.sqrt(12.5))

    def test_zeroLengthSegment (self):
        point, t = Helpers.nearestPointOnSegment(1, 1, 1, 1, 3, 3)
        self.assertEqual(point, (1, 1))
        self.assertEqual(t, 0)

    def test_pointAlongPolyline (self):
        points = [(0,10), (0,0), (10,0)]
        self.assertEqual(Helpers.pointAlongPolyline(points, 15), (5, 0))
        self.assertEqual(Helpers.pointAlongPolyline(points, -1), (0, 10))
        self.assertEqual(Helpers.pointAlongPolyline(points, 50), (10, 0))

    def test_boxDist (self):
        box = Helpers.boundingBox([(0,0), (2,2)])
        self.assertEqual(Helpers.boxDist(box, 1, 1), 0)
        self.assertEqual(Helpers.boxDist(box, 5, 6), 5)

    def test_formatList (self):
        self.assertEqual(Helpers.formatList([]), "")
        self.assertEqual(Helpers.formatList([1, 2]), "1 and 2")
        self.assertEqual(Helpers.formatList([1, 2, 3]), "1, 2, and 3")
