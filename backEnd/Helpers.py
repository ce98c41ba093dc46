import math

def nearestPointOnSegment(vx, vy, wx, wy, px, py):
    """ Gets the nearest point on a segment (v, w) to a given point (p).

    :param vx: X of p1.
    :param vy: Y of p1.
    :param wx: X of p2.
    :param wy: Y of p2.


    :return: ((x,y), t), where t is the relative position on the segment (0-1) """
    l2 = fastMagDist(vx, vy, wx, wy)
    if (l2 == 0):
        return (vx, vy), 0

    t = ((px - vx) * (wx - vx) + (py - vy) * (wy - vy)) / l2
    t = max(0, min(1, t))
    return (vx + t * (wx - vx), vy + t * (wy - vy)), t

def projectOntoPolyline (points, px, py):
    """ Project a point onto a polyline.

    When several parts of the line are equally close, the most upstream one (first in points) wins.

    :param points: A list of (x,y) tuples.

    :return: ((x,y), distance to the line, distance along the line from points[0]) """
    if len(points) == 1:
        return (points[0][0], points[0][1]), dist(points[0][0], points[0][1], px, py), 0.0

    bestPoint = None
    bestDist = float("inf")
    bestAlong = 0.0
    along = 0.0
    for i in range(len(points) - 1):
        v = points[i]
        w = points[i+1]
        partLength = dist(v[0], v[1], w[0], w[1])
        nearest, t = nearestPointOnSegment(v[0], v[1], w[0], w[1], px, py)
        d = dist(nearest[0], nearest[1], px, py)
        if d < bestDist:
            bestDist = d
            bestPoint = nearest
            bestAlong = along + t * partLength
        along += partLength
    return bestPoint, bestDist, bestAlong

def pointAlongPolyline (points, distAlong):
    """ Gets the coordinates of the point distAlong map units from points[0]. Clamped to the line ends. """
    if distAlong <= 0 or len(points) == 1:
        return (points[0][0], points[0][1])
    along = 0.0
    for i in range(len(points) - 1):
        v = points[i]
        w = points[i+1]
        partLength = dist(v[0], v[1], w[0], w[1])
        if partLength > 0 and along + partLength >= distAlong:
            t = (distAlong - along) / partLength
            return (v[0] + t * (w[0] - v[0]), v[1] + t * (w[1] - v[1]))
        along += partLength
    return (points[-1][0], points[-1][1])

def polylineLength (points):
    """ Summed length of the parts of a polyline. """
    length = 0.0
    for i in range(len(points) - 1):
        length += dist(points[i][0], points[i][1], points[i+1][0], points[i+1][1])
    return length

def boundingBox (points):
    """ (minX, minY, maxX, maxY) of a list of points. """
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return (min(xs), min(ys), max(xs), max(ys))

def boxDist (box, px, py):
    """ Distance from a point to a bounding box. 0 inside the box. Never larger than the distance to anything in the box. """
    dx = max(box[0] - px, 0, px - box[2])
    dy = max(box[1] - py, 0, py - box[3])
    return math.sqrt(dx*dx + dy*dy)

def formatList (list):
    """ Return a pretty formatted string for a list. Adds Oxford comma and commas when needed.

    :param list: A list of anything. """
    if len(list) == 0:
        return ""
    if len(list) == 1:
        return str(list[0])
    formatedString = ""
    oxfordComma = len(list) > 2
    for i in range(0, len(list)-1):
        formatedString += str(list[i])
        if i < len(list)-2:
            formatedString += ", "
    if oxfordComma:
        formatedString += ","
    formatedString += " and " + str(list[-1])
    return formatedString

def dist (x1, y1, x2, y2):
    """ Simple dist function. """
    return math.sqrt((x2 - x1)**2 + (y2 - y1)**2)

def fastMagDist (x1, y1, x2, y2):
    """ Equivilant to dist^2. This can be used to compare the relative closeness of things while avoid the slow sqrt function. """
    return (x2 - x1)**2 + (y2 - y1)**2
