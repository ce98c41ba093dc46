from collections import namedtuple
import Helpers

if __debug__:
    import matplotlib.pyplot as plt

#constants for neighbor relationships
UNKNOWN = 0         #000
UPSTREAM = 1        #001 a one in the one's place means upstream
DOWNSTREAM = 4      #100 contains a one in the four's place indicating a downstream segment

#lengths and distances are rounded to this many digits only when written to an attribute table
PERSISTED_DIGITS = 2

EDGE_COLUMNS = ["cat", "stream", "rid", "netID", "Length", "upDist"]

#tuples used
NeighborRelationship = namedtuple('NeighborRelationship', 'segment relationship')

#a stream node
class StreamNode (object):
    def __init__(self, position, instanceID = 0):
        self.neighbors = []
        self.position = position
        self.instanceID = instanceID

    def addNeighbor (self, segment, relationship = UNKNOWN):
        """ Add a neighbor to this node with a specific relationship """
        self.neighbors.append(NeighborRelationship(segment=segment, relationship=relationship))

    def neighborHasRelationShip(self, neighborTuple, relationship):
        """ Check to see if a given neighbor has the specified relationship. """
        if neighborTuple.relationship & relationship == relationship:
            return True
        return False

    def getUpstreamNeighbors(self):
        """ Gets the upstream neighbors. """
        return self.getCodedNeighbors(UPSTREAM)

    def getDownstreamNeighbors(self):
        """ Gets the downstream neighbors. """
        return self.getCodedNeighbors(DOWNSTREAM)

    def getCodedNeighbors (self, relationshipCode):
        """ Gets the neighbors with the specified relationship. """
        results = []
        for neighbor in self.neighbors:
            #does the relationship contain this flag
            if self.neighborHasRelationShip(neighbor, relationshipCode):
                results.append(neighbor.segment)
        return results

    def getSortedUpstreamBranches (self):
        """ Returns the upstream segments of this node sorted by cat so traversals are reproducible. """
        return sorted(self.getUpstreamNeighbors(), key=lambda segment: segment.cat)

    def inflowDegree (self):
        return len(self.getUpstreamNeighbors())

    #removes the neighbor if it exists. Return true if removed successfully
    def removeNeighbor (self, segment):
        """ Remove a neighbor by segment reference """
        for i, neighbor in enumerate(self.neighbors):
            if neighbor.segment is segment:
                self.neighbors.pop(i)
                return True
        return False

    def numNeighbors(self):
        """ Get the number of neighbors of this node. """
        return len(self.neighbors)

#a reach connecting two nodes. points run from the upstream node to the downstream node
class StreamSegment (object):
    def __init__(self, upStreamNode, downStreamNode, cat, length, points, stream = None, auxiliary = False):
        self.upStreamNode = upStreamNode
        self.downStreamNode = downStreamNode
        self.cat = cat
        #id of the raw stream segment this reach was traced from
        self.stream = stream if stream is not None else cat
        self.length = length
        self.points = points
        self.auxiliary = auxiliary
        self.box = Helpers.boundingBox(points)
        #set by calcEdges
        self.rid = None
        self.netID = None
        self.upDist = None

    def getDownstreamSegment (self):
        """ The segment this one drains into, None at an outlet. """
        downstream = self.downStreamNode.getDownstreamNeighbors()
        if len(downstream) == 0:
            return None
        return downstream[0]

    def getUpstreamSegments (self):
        return self.upStreamNode.getSortedUpstreamBranches()

    def isOutlet (self):
        return len(self.downStreamNode.getDownstreamNeighbors()) == 0

    def isSource (self):
        return len(self.upStreamNode.getUpstreamNeighbors()) == 0

    def getPointOnSegment (self, distAlongSegment):
        """ Gets the coordinates of a point on the segment.

        :param distAlongSegment: 0 is the upStreamNode, segment.length is the downStreamNode. """
        return Helpers.pointAlongPolyline(self.points, distAlongSegment)

    def project (self, point):
        """ Project a point on this segment.

        :return: ((x,y), distance to the segment, distance along the segment from the upstream node) """
        return Helpers.projectOntoPolyline(self.points, point[0], point[1])

    def getRecord (self):
        """ The attribute table row of this segment. """
        upDist = None
        if self.upDist is not None:
            upDist = round(self.upDist, PERSISTED_DIGITS)
        return {
            "cat":self.cat,
            "stream":self.stream,
            "rid":self.rid,
            "netID":self.netID,
            "Length":round(self.length, PERSISTED_DIGITS),
            "upDist":upDist
        }

class StreamGraph (object):
    """ The edge/node graph of a stream network. """
    def __init__(self):
        self.segments = {}#keyed by cat
        self.nodes = []
        self.nextNodeID = 0#local ID counter for stream nodes. This gets incremented
        self.nextSegmentID = 1

    if __debug__:
        #visualize the graph using matplotlib
        def visualize(self, siteLayers = [], showSegInfo = False, show = True):
            """ Visualize the graph using matplotlib """
            for streamSeg in self.getSortedSegments():
                x = [p[0] for p in streamSeg.points]
                y = [p[1] for p in streamSeg.points]
                plt.plot(x, y, linewidth=0.5, color='blue')

                startPt = streamSeg.upStreamNode.position
                endPt = streamSeg.downStreamNode.position
                dx = endPt[0] - startPt[0]
                dy = endPt[1] - startPt[1]
                if dx != 0 or dy != 0:
                    plt.arrow(startPt[0], startPt[1], dx, dy, width=0, head_width = streamSeg.length * 0.05, color='blue', length_includes_head=True)

                if showSegInfo is True:
                    midPoint = streamSeg.getPointOnSegment(streamSeg.length / 2)
                    segmentInfo = str(streamSeg.cat) + "\n" + str(streamSeg.rid) + "\n" + str(round(streamSeg.length, 2))
                    plt.text(midPoint[0], midPoint[1], segmentInfo, fontsize = 8)

            for siteLayer in siteLayers:
                #original positions in grey, connected to the snapped ones
                for site in siteLayer.sites:
                    if site.originalPosition != site.position:
                        plt.plot([site.originalPosition[0], site.position[0]], [site.originalPosition[1], site.position[1]], linewidth=0.5, color='grey')
                x = [site.originalPosition[0] for site in siteLayer.sites]
                y = [site.originalPosition[1] for site in siteLayer.sites]
                plt.scatter(x, y, color='grey', marker='.')
                x = [site.position[0] for site in siteLayer.sites]
                y = [site.position[1] for site in siteLayer.sites]
                plt.scatter(x, y, color='red', marker='x')

            x = []
            y = []
            for sink in self.getSinks():
                x.append(sink.position[0])
                y.append(sink.position[1])
            plt.scatter(x,y, color='green')

            figure = plt.gcf()
            if show:
                plt.show()
            return figure

    def addNode (self, position):
        """ Adds a node to the graph at position. """
        newNode = StreamNode(position, self.nextNodeID)
        self.nodes.append(newNode)
        self.nextNodeID += 1
        return newNode

    def removeNode (self, node):
        """ Remove a node that no longer has any neighbors. """
        self.nodes.remove(node)

    #add a segment to the graph
    def addSegment (self, upstreamNode, downstreamNode, points, length = None, cat = None, stream = None, auxiliary = False):
        """ Add a segment to the graph. A new cat is drawn when none is given. Length defaults to the polyline length. """
        if cat is None:
            cat = self.nextSegmentID
        self.nextSegmentID = max(self.nextSegmentID, cat + 1)
        if length is None:
            length = Helpers.polylineLength(points)
        newSegment = StreamSegment(upstreamNode, downstreamNode, cat, length, points, stream = stream, auxiliary = auxiliary)
        #add the new segment to the dictionary
        self.segments[cat] = newSegment
        #from the perspective of the upstream node, this segment is downstream and vice versa
        upstreamNode.addNeighbor(newSegment, DOWNSTREAM)
        downstreamNode.addNeighbor(newSegment, UPSTREAM)

        return newSegment

    #safely remove a segment from the graph
    def removeSegment (self, segment):
        """ Remove segment by segment reference. """
        if segment.cat in self.segments:
            segment.upStreamNode.removeNeighbor(segment)
            segment.downStreamNode.removeNeighbor(segment)
            del self.segments[segment.cat]

    def reconnectDownstream (self, segment, newDownstreamNode):
        """ Let segment drain into newDownstreamNode instead of its current downstream node. """
        segment.downStreamNode.removeNeighbor(segment)
        segment.downStreamNode = newDownstreamNode
        newDownstreamNode.addNeighbor(segment, UPSTREAM)

    def getSortedSegments (self):
        return sorted(self.segments.values(), key=lambda segment: segment.cat)

    def getSinks (self):
        """ Get a list of nodes that have no downstream connection. Every node must be upstream from a sink. """
        sinks = []
        for node in self.nodes:
            if len(node.getDownstreamNeighbors()) == 0 and len(node.getUpstreamNeighbors()) > 0:
                sinks.append(node)
        return sinks

    def getOutletSegments (self):
        """ Segments without a downstream segment, sorted by cat. """
        return [segment for segment in self.getSortedSegments() if segment.isOutlet()]

    def getNetIDs (self):
        return sorted(set(segment.netID for segment in self.segments.values() if segment.netID is not None))

    def totalLength (self, netID = None):
        """ Summed length of all segments, or of the segments of one network. """
        return sum(segment.length for segment in self.segments.values() if netID is None or segment.netID == netID)

    def copy (self, netIDs = None, renumber = False):
        """ Build an independent copy of the graph.

        :param netIDs: Only copy segments of these networks.
        :param renumber: Give the copied segments new sequential cats, starting at 1. """
        segments = [segment for segment in self.getSortedSegments() if netIDs is None or segment.netID in netIDs]

        usedNodes = {}
        for segment in segments:
            usedNodes[segment.upStreamNode.instanceID] = segment.upStreamNode
            usedNodes[segment.downStreamNode.instanceID] = segment.downStreamNode

        newGraph = StreamGraph()
        nodeMap = {}
        for instanceID in sorted(usedNodes):
            nodeMap[instanceID] = newGraph.addNode(usedNodes[instanceID].position)

        for i, segment in enumerate(segments):
            if renumber:
                cat = i + 1
                stream = cat
            else:
                cat = segment.cat
                stream = segment.stream
            newSegment = newGraph.addSegment(nodeMap[segment.upStreamNode.instanceID], nodeMap[segment.downStreamNode.instanceID], list(segment.points),
                length = segment.length, cat = cat, stream = stream, auxiliary = segment.auxiliary)
            newSegment.rid = segment.rid
            newSegment.netID = segment.netID
            newSegment.upDist = segment.upDist
        if not renumber:
            newGraph.nextSegmentID = max(newGraph.nextSegmentID, self.nextSegmentID)
        return newGraph

    def getAttributeTable (self):
        """ The persisted attribute table, one row per segment ordered by cat. """
        return [segment.getRecord() for segment in self.getSortedSegments()]

    def getGeoJSON (self):
        """ Get a GeoJson representation of the graph. """
        geojson = {
            "type": "FeatureCollection",
            "features":[]
        }

        for segment in self.getSortedSegments():
            feature = {
                "type":"Feature",
                "geometry":{
                    "type": "LineString",
                    "coordinates": [list(p) for p in segment.points]
                },
                "properties": segment.getRecord()
            }
            geojson["features"].append(feature)

        return geojson
