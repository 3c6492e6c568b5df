import sys

import tailordxf


doc = tailordxf.read(sys.argv[1] if len(sys.argv) > 1 else "examples/data/sample_r12.dxf")
print(f"version={doc.dxfversion} terminated={doc.terminated}")
for entity in doc.modelspace().query("LINE POLYLINE"):
    print(entity.dxftype, entity.layer, entity.to_points())
for item in doc.diagnostics:
    print(item)
