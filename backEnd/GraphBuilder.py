import numpy as np
from StreamGraph import StreamGraph
from Failures import GraphExtractionError

#D8 direction codes and the (row, col) offset each one points to
D8_CODES = (1, 2, 4, 8, 16, 32, 64, 128)
D8_OFFSETS = ((0, 1), (1, 1), (1, 0), (1, -1), (0, -1), (-1, -1), (-1, 0), (-1, 1))

#row/col of the pixel centre, north up with unit cells
DEFAULT_GEOTRANSFORM = (0.0, 1.0, 0.0, 0.0, 0.0, -1.0)

#marker for cells that drain out of the stream network
OUTLET = None

class StreamGraphBuilder (object):
    """ Builds a StreamGraph from a stream raster and a D8 flow direction raster.

    Every maximal run of stream cells between two junctions (source, confluence or outlet)
    becomes one segment. Junction cells become nodes. """

    def __init__(self, streams, flowDir, geotransform = None, minSegmentLength = 0, clean = True):
        """
        :param streams: 2D array. Cells that are non zero and not NaN are stream cells.
        :param flowDir: 2D array of D8 codes (1=E, 2=SE, ... 128=NE). Negative codes flow out of the region.
        :param geotransform: GDAL style geotransform of both rasters.
        :param minSegmentLength: Source segments shorter than this (map units) are removed in clean mode.
        :param clean: Remove short source segments and merge the nodes this leaves behind. """
        self.streams = np.asarray(streams, dtype=np.float64)
        self.flowDir = np.asarray(flowDir, dtype=np.float64)
        self.geotransform = geotransform if geotransform is not None else DEFAULT_GEOTRANSFORM
        self.minSegmentLength = minSegmentLength
        self.clean = clean

    def build (self):
        """ Trace the rasters and return the resulting StreamGraph. """
        streamCells = self._getStreamCells()
        downstream = self._getDownstreamCells(streamCells)
        self._checkForCycles(streamCells, downstream)

        inflow = dict((cell, 0) for cell in streamCells)
        for cell in streamCells:
            nextCell = downstream[cell]
            if nextCell is not OUTLET:
                inflow[nextCell] += 1

        graph = StreamGraph()
        junctionNodes = {}

        def getJunctionNode (cell):
            if cell not in junctionNodes:
                junctionNodes[cell] = graph.addNode(self._cellPosition(cell))
            return junctionNodes[cell]

        #segments start at sources and at confluence cells. streamCells is in row major order
        heads = [cell for cell in streamCells if inflow[cell] != 1]
        for head in heads:
            cells = [head]
            current = head
            endCell = None
            while True:
                nextCell = downstream[current]
                if nextCell is OUTLET:
                    break
                if inflow[nextCell] != 1:
                    endCell = nextCell
                    break
                cells.append(nextCell)
                current = nextCell

            points = [self._cellPosition(cell) for cell in cells]
            upstreamNode = getJunctionNode(head)
            if endCell is not None:
                points.append(self._cellPosition(endCell))
                downstreamNode = getJunctionNode(endCell)
            else:
                outletPoint = self._outletPosition(cells[-1])
                if outletPoint is not None:
                    points.append(outletPoint)
                downstreamNode = graph.addNode(points[-1])
            graph.addSegment(upstreamNode, downstreamNode, points)

        if __debug__:
            print("Traced " + str(len(graph.segments)) + " stream segments from " + str(len(streamCells)) + " stream cells")

        if self.clean:
            self._removeShortSources(graph)
            self._mergePassThroughNodes(graph)
            graph = graph.copy(renumber = True)

        return graph

    def _getStreamCells (self):
        """ Validate the rasters and list the stream cells in row major order. """
        if self.streams.ndim != 2 or self.streams.size == 0:
            raise GraphExtractionError("stream raster is empty")
        if self.flowDir.shape != self.streams.shape:
            raise GraphExtractionError("stream raster " + str(self.streams.shape) + " and flow direction raster " + str(self.flowDir.shape) + " differ in shape")

        mask = (self.streams != 0) & ~np.isnan(self.streams)
        cells = [(int(r), int(c)) for r, c in np.argwhere(mask)]
        if len(cells) == 0:
            raise GraphExtractionError("stream raster contains no stream cells")
        return cells

    def _getDownstreamCells (self, streamCells):
        rows, cols = self.streams.shape
        streamSet = set(streamCells)
        downstream = {}
        for row, col in streamCells:
            code = self.flowDir[row, col]
            if np.isnan(code) or code == 0:
                raise GraphExtractionError("stream cell (" + str(row) + ", " + str(col) + ") has no valid downstream direction")
            if code < 0:
                downstream[(row, col)] = OUTLET
                continue
            if code not in D8_CODES:
                raise GraphExtractionError("stream cell (" + str(row) + ", " + str(col) + ") has unknown direction code " + str(code))
            dr, dc = D8_OFFSETS[D8_CODES.index(code)]
            nextCell = (row + dr, col + dc)
            if 0 <= nextCell[0] < rows and 0 <= nextCell[1] < cols and nextCell in streamSet:
                downstream[(row, col)] = nextCell
            else:
                downstream[(row, col)] = OUTLET
        return downstream

    def _checkForCycles (self, streamCells, downstream):
        """ Follow every cell downstream. Each path must reach an outlet. """
        reachesOutlet = set()
        for start in streamCells:
            path = []
            onPath = set()
            current = start
            while current is not OUTLET and current not in reachesOutlet:
                if current in onPath:
                    raise GraphExtractionError("flow directions form a cycle at cell " + str(current))
                onPath.add(current)
                path.append(current)
                current = downstream[current]
            reachesOutlet.update(path)

    def _cellPosition (self, cell):
        row, col = cell
        gt = self.geotransform
        x = gt[0] + (col + 0.5) * gt[1] + (row + 0.5) * gt[2]
        y = gt[3] + (col + 0.5) * gt[4] + (row + 0.5) * gt[5]
        return (x, y)

    def _outletPosition (self, cell):
        """ Half a cell past the outlet cell centre, along its flow direction. None if it drains out of the region. """
        code = self.flowDir[cell]
        if code not in D8_CODES:
            return None
        dr, dc = D8_OFFSETS[D8_CODES.index(code)]
        x, y = self._cellPosition(cell)
        return (x + 0.5 * dc * self.geotransform[1], y + 0.5 * dr * self.geotransform[5])

    def _removeShortSources (self, graph):
        """ Remove source segments shorter than minSegmentLength that join a confluence. """
        if self.minSegmentLength <= 0:
            return
        removed = 0
        for segment in graph.getSortedSegments():
            if not segment.isSource() or segment.isOutlet():
                continue
            if segment.length < self.minSegmentLength and segment.downStreamNode.inflowDegree() > 1:
                graph.removeSegment(segment)
                graph.removeNode(segment.upStreamNode)
                removed += 1
        if __debug__:
            print("Removed " + str(removed) + " source segments shorter than " + str(self.minSegmentLength))

    def _mergePassThroughNodes (self, graph):
        """ Collapse nodes with exactly one upstream and one downstream segment. """
        queue = [node for node in graph.nodes if node.inflowDegree() == 1 and len(node.getDownstreamNeighbors()) == 1]

        while len(queue) > 0:
            node = queue.pop()
            upstreamSegment = node.getUpstreamNeighbors()[0]
            downstreamSegment = node.getDownstreamNeighbors()[0]

            newPoints = upstreamSegment.points + downstreamSegment.points[1:]
            newLength = upstreamSegment.length + downstreamSegment.length
            upstreamNode = upstreamSegment.upStreamNode
            downstreamNode = downstreamSegment.downStreamNode

            graph.removeSegment(upstreamSegment)
            graph.removeSegment(downstreamSegment)
            graph.removeNode(node)
            graph.addSegment(upstreamNode, downstreamNode, newPoints, length = newLength, cat = min(upstreamSegment.cat, downstreamSegment.cat))
