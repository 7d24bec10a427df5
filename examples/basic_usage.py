# Basic usage example

import os
import time

from obsdisk import ObsDiskManager, ObsDiskError


def main():
    # Initialize manager (will use OBSDISK_* environment or defaults)
    manager = ObsDiskManager()

    loop = manager.refresh_loop(
        lambda records: [print(f"+ {r.name} ({r.provider_type})") for r in records]
    )
    loop.start()

    try:
        record = manager.create_volume(
            "demo-disk",
            access_key=os.environ["OBS_ACCESS_KEY"],
            secret_key=os.environ["OBS_SECRET_KEY"],
            bucket="https://demo.oss-cn-hangzhou.aliyuncs.com",
        )
        print(f"✓ Volume created: {record.name}")

        mount_point = manager.mount(record.name)
        print(f"✓ Mounted at {mount_point}")

        time.sleep(2)

        manager.unmount(record.name)
        print("✓ Unmounted")

    except ObsDiskError as e:
        print(f"\n❗ Error: {e.message}")
    finally:
        loop.stop()
        manager.close()


if __name__ == "__main__":
    main()
