import math
import time

import tfgraph


def _yaw_quat(yaw: float) -> tuple[float, float, float, float]:
    return (0.0, 0.0, math.sin(0.5 * yaw), math.cos(0.5 * yaw))


def main() -> None:
    server = tfgraph.run(port=57794)

    server.publish_transforms(
        [
            {
                "header": {"frame_id": "base_link"},
                "child_frame_id": "camera_link",
                "transform": {
                    "translation": {"x": 0.2, "y": 0.0, "z": 0.3},
                    "rotation": {"x": 0.0, "y": 0.0, "z": 0.0, "w": 1.0},
                },
            }
        ]
    )

    markers = [
        {
            "id": 7,
            "size": 0.15,
            "pose": {"position": {"x": 1.0, "y": 0.0, "z": 0.0}, "orientation": {"w": 1.0}},
            "corners": [{"x": 1.0, "y": -0.075, "z": -0.075}, {"x": 1.0, "y": 0.075, "z": 0.075}],
        }
    ]

    try:
        t0 = time.time()
        while True:
            t = time.time() - t0
            # Robot drives in a circle around the map origin.
            server.publish_transform("map", "base_link", (math.cos(t), math.sin(t), 0.0), _yaw_quat(t + 0.5 * math.pi))
            in_map = server.transform_batch(markers, "camera_link", root="map")
            print(in_map[0]["pose"]["position"])
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
