import unittest
import numpy as np
from GraphBuilder import StreamGraphBuilder
from Failures import GraphExtractionError

#D8 codes
E = 1
SE = 2
S = 4
SW = 8
W = 16
N = 64

def rasters (shape, cells):
    """ Stream and direction rasters from a dict of (row, col) -> D8 code. """
    streams = np.zeros(shape)
    dirs = np.zeros(shape)
    for cell, code in cells.items():
        streams[cell] = 1
        dirs[cell] = code
    return streams, dirs

#two sources meeting at (2,2), draining south out of the grid
Y_CELLS = {(0,0):SE, (1,1):SE, (0,4):SW, (1,3):SW, (2,2):S, (3,2):S, (4,2):S}

class GraphBuilderTests (unittest.TestCase):

    def test_traceY (self):
        streams, dirs = rasters((5,5), Y_CELLS)
        graph = StreamGraphBuilder(streams, dirs).build()

        self.assertEqual(sorted(graph.segments), [1, 2, 3])
        self.assertEqual(graph.segments[1].points, [(0.5,-0.5), (1.5,-1.5), (2.5,-2.5)])
        self.assertAlmostEqual(graph.segments[1].length, 2 * np.sqrt(2))
        #the outlet reach runs half a cell past the last cell centre
        self.assertEqual(graph.segments[3].points, [(2.5,-2.5), (2.5,-3.5), (2.5,-4.5), (2.5,-5.0)])
        self.assertAlmostEqual(graph.segments[3].length, 2.5)

        outlet = graph.segments[3]
        self.assertTrue(outlet.isOutlet())
        self.assertEqual([s.cat for s in outlet.getUpstreamSegments()], [1, 2])
        self.assertEqual(len(graph.getSinks()), 1)

    def test_threeInflows (self):
        cells = dict(Y_CELLS)
        cells[(0,2)] = S
        cells[(1,2)] = S
        streams, dirs = rasters((5,5), cells)
        graph = StreamGraphBuilder(streams, dirs).build()

        self.assertEqual(len(graph.segments), 4)
        self.assertEqual(graph.segments[4].upStreamNode.inflowDegree(), 3)

    def test_geotransform (self):
        streams, dirs = rasters((5,5), Y_CELLS)
        graph = StreamGraphBuilder(streams, dirs, geotransform = (100, 10, 0, 200, 0, -10)).build()
        self.assertEqual(graph.segments[1].points[0], (105, 195))
        self.assertAlmostEqual(graph.segments[3].length, 25)

    def test_negativeCodeIsOutlet (self):
        streams, dirs = rasters((1,3), {(0,0):E, (0,1):-1})
        graph = StreamGraphBuilder(streams, dirs).build()
        self.assertEqual(len(graph.segments), 1)
        self.assertEqual(graph.segments[1].points, [(0.5,-0.5), (1.5,-0.5)])

    def test_flowOutOfGrid (self):
        streams, dirs = rasters((1,1), {(0,0):N})
        graph = StreamGraphBuilder(streams, dirs).build()
        self.assertEqual(graph.segments[1].points, [(0.5,-0.5), (0.5,0.0)])
        self.assertEqual(graph.segments[1].length, 0.5)

    def test_nanCellsAreNotStreams (self):
        streams, dirs = rasters((5,5), Y_CELLS)
        streams[streams == 0] = np.nan
        graph = StreamGraphBuilder(streams, dirs).build()
        self.assertEqual(len(graph.segments), 3)

class CleanTests (unittest.TestCase):
    #a main stem in column 2 with a one cell tributary joining at (3,2)
    CELLS = {(0,2):S, (1,2):S, (2,2):S, (3,2):S, (4,2):S, (5,2):S, (3,3):W}

    def test_shortSourceRemoved (self):
        streams, dirs = rasters((6,5), self.CELLS)
        graph = StreamGraphBuilder(streams, dirs, minSegmentLength = 2).build()

        self.assertEqual(sorted(graph.segments), [1])
        segment = graph.segments[1]
        self.assertAlmostEqual(segment.length, 5.5)
        self.assertEqual(len(segment.points), 7)
        self.assertEqual(len(graph.nodes), 2)

    def test_longSourceKept (self):
        streams, dirs = rasters((6,5), self.CELLS)
        graph = StreamGraphBuilder(streams, dirs, minSegmentLength = 0.5).build()
        self.assertEqual(len(graph.segments), 3)

    def test_minLengthIgnoredWithoutClean (self):
        streams, dirs = rasters((6,5), self.CELLS)
        graph = StreamGraphBuilder(streams, dirs, minSegmentLength = 2, clean = False).build()
        self.assertEqual(len(graph.segments), 3)
        self.assertEqual(sorted(round(s.length, 6) for s in graph.segments.values()), [1, 2.5, 3])

class ExtractionErrorTests (unittest.TestCase):

    def test_cycle (self):
        streams, dirs = rasters((1,2), {(0,0):E, (0,1):W})
        with self.assertRaises(GraphExtractionError):
            StreamGraphBuilder(streams, dirs).build()

    def test_noStreamCells (self):
        with self.assertRaises(GraphExtractionError):
            StreamGraphBuilder(np.zeros((3,3)), np.zeros((3,3))).build()

    def test_emptyRaster (self):
        with self.assertRaises(GraphExtractionError):
            StreamGraphBuilder(np.zeros((0,0)), np.zeros((0,0))).build()

    def test_shapeMismatch (self):
        streams, dirs = rasters((5,5), Y_CELLS)
        with self.assertRaises(GraphExtractionError):
            StreamGraphBuilder(streams, dirs[:4]).build()

    def test_missingDirection (self):
        streams, dirs = rasters((5,5), Y_CELLS)
        dirs[1,1] = 0
        with self.assertRaises(GraphExtractionError):
            StreamGraphBuilder(streams, dirs).build()

    def test_unknownCode (self):
        streams, dirs = rasters((5,5), Y_CELLS)
        dirs[1,1] = 3
        with self.assertRaises(GraphExtractionError):
            StreamGraphBuilder(streams, dirs).build()
