"""Generate synthetic halls and rosters for the Exam Seat Allocation console."""

import pandas as pd
import random
import os


def generate_halls_df() -> pd.DataFrame:
    """Generate hall master data: 4 halls of varying size, one inactive."""
    return pd.DataFrame([
        {"Hall ID": "H1", "Hall Name": "Main Hall",      "Rows": 10, "Columns": 8, "Active": True},
        {"Hall ID": "H2", "Hall Name": "Science Block",  "Rows": 6,  "Columns": 6, "Active": True},
        {"Hall ID": "H3", "Hall Name": "Library Annex",  "Rows": 5,  "Columns": 5, "Active": True},
        {"Hall ID": "H4", "Hall Name": "Old Gym",        "Rows": 8,  "Columns": 10, "Active": False},
    ])


def generate_students_df(count: int = 120, seed: int = 42) -> pd.DataFrame:
    """Generate a roster spread unevenly over six class groups."""
    rng = random.Random(seed)
    classes = ["JSS1", "JSS2", "JSS3", "SS1", "SS2", "SS3"]
    weights = [0.25, 0.20, 0.15, 0.15, 0.15, 0.10]

    rows = []
    for i in range(1, count + 1):
        class_group = rng.choices(classes, weights=weights)[0]
        if rng.random() < 0.03:
            class_group = None  # A few students missing a class
        rows.append({
            "Student ID": f"STU{i:04d}",
            "Student Name": f"Student {i}",
            "Class Group": class_group,
        })
    return pd.DataFrame(rows)


def generate_sample_csvs(output_dir: str):
    """Write sample CSV files to the given directory."""
    os.makedirs(output_dir, exist_ok=True)
    generate_halls_df().to_csv(os.path.join(output_dir, "halls.csv"), index=False)
    generate_students_df().to_csv(os.path.join(output_dir, "students.csv"), index=False)


def generate_sample_excel(output_dir: str):
    """Write a single two-tab Excel file with both datasets."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, "sample_data.xlsx")
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        generate_halls_df().to_excel(writer, sheet_name="Halls", index=False)
        generate_students_df().to_excel(writer, sheet_name="Students", index=False)


if __name__ == "__main__":
    out = os.path.join(os.path.dirname(__file__), "..", "sample_files")
    generate_sample_csvs(out)
    generate_sample_excel(out)
    print("Sample CSV and Excel files generated in sample_files/")
