#!/usr/bin/env python3
"""
Demo of the hwvault snapshot and summary functions
"""

import hwvault as hv


def main():
    print("Collecting hardware snapshot...")

    snapshot = hv.system_info()

    print(f"\n=== System ===")
    print(f"OS: {snapshot.os.name} {snapshot.os.version or ''}".rstrip())
    print(f"Manufacturer: {snapshot.manufacturer_info.system_manufacturer}")
    print(f"Type: {snapshot.hardware.system_type}")

    board = snapshot.baseboard
    print(f"\n=== Baseboard ===")
    print(f"Product: {board.product}")
    print(f"Chipset: {board.pci_slot_info.model} ({board.pci_slot_info.version})")
    if board.pci_slot_info.available_slots:
        for slot in board.pci_slot_info.available_slots:
            print(f"  {slot.type}: {slot.total_bandwidth}")

    memory = snapshot.hardware.memory
    print(f"\n=== Memory ===")
    print(f"Slots: {memory.used_memory_slots}/{memory.total_memory_slots}")
    for module in memory.memory_modules:
        print(f"  {module.device_locator}: {module.capacity_mb} MB {module.memory_type} "
              f"{module.form_factor} ({module.manufacturer})")

    print(f"\n=== Storage ===")
    for disk in snapshot.storage:
        print(f"  {disk.model}: {disk.drive_type}, {disk.size_gb} GB")

    # Components that could not be probed on this machine
    if snapshot.diagnostics.failed_probes:
        print(f"\n=== Unavailable ===")
        for failure in snapshot.diagnostics.failed_probes:
            print(f"  {failure.kind}: {failure.status} ({failure.error})")

    print(f"\n=== Summary ===")
    print(hv.system_summary().model_dump_json(indent=2))


if __name__ == "__main__":
    main()
