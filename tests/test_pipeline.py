"""
端到端测试
参数处理 → 测量 → 归一化 → URDF 报告, 以及 CLI 退出码
"""
import unittest
import io
import numpy as np
from contextlib import redirect_stdout
from pathlib import Path
import tempfile
import shutil
import sys

# 添加src路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import trimesh

from urdf_inertia.core.config import ConfigManager
from urdf_inertia.core.errors import DegenerateGeometryError, MeshImportError, UsageError
from urdf_inertia.main import main, run
from urdf_inertia.simulation.normalizer import NormalizedLink
from urdf_inertia.simulation.urdf_builder import format_link, format_report, save_urdf


class PipelineTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.conf = ConfigManager.load()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def export_box(self, name, extents, offset=(0.0, 0.0, 0.0)):
        mesh = trimesh.creation.box(extents=extents)
        mesh.apply_translation(offset)
        path = self.temp_dir / name
        mesh.export(str(path))
        return str(path)

    def write_joints(self, text, name="joints.txt"):
        path = self.temp_dir / name
        path.write_text(text)
        return str(path)


class TestRun(PipelineTestCase):
    """测试参数驱动的完整流程"""

    def test_two_equal_cubes(self):
        a = self.export_box("a.stl", [1, 1, 1])
        b = self.export_box("b.stl", [1, 1, 1])
        links, mass = run([a, b, "2.0"], self.conf)

        self.assertEqual(mass, 2.0)
        self.assertEqual([l.name for l in links], [a, b])
        for link in links:
            self.assertAlmostEqual(link.mass, 1.0, places=9)
            np.testing.assert_allclose(link.inertia, np.eye(3) / 6.0, atol=1e-9)
        np.testing.assert_allclose(links[0].inertia, links[1].inertia, atol=1e-12)

    def test_default_mass(self):
        a = self.export_box("a.stl", [1, 2, 3])
        links, mass = run([a], self.conf)

        self.assertEqual(mass, 1.0)
        self.assertAlmostEqual(links[0].mass, 1.0, places=9)
        # 密度 1/6
        self.assertAlmostEqual(links[0].inertia[2, 2], 1.0 / 12 * (1 + 4), places=9)

    def test_last_mass_wins(self):
        a = self.export_box("a.stl", [1, 1, 1])
        _, mass = run(["3", a, "5.5"], self.conf)
        self.assertEqual(mass, 5.5)

    def test_joint_file_applies_chain(self):
        a = self.export_box("a.stl", [1, 1, 1], offset=[0, 0, 0.5])
        b = self.export_box("b.stl", [1, 1, 1], offset=[0, 0, 0.5])
        joints = self.write_joints("1 0 0 0 0 0\n0 1 0 0 0 0\n")
        links, _ = run([joints, a, b], self.conf)

        np.testing.assert_allclose(links[0].visual_origin, [-1, 0, 0])
        np.testing.assert_allclose(links[0].center_of_mass, [-1, 0, 0.5], atol=1e-9)
        np.testing.assert_allclose(links[1].visual_origin, [-1, -1, 0])
        np.testing.assert_allclose(links[1].center_of_mass, [-1, -1, 0.5], atol=1e-9)

    def test_later_joint_file_replaces(self):
        a = self.export_box("a.stl", [1, 1, 1])
        first = self.write_joints("5 5 5\n", "first.txt")
        second = self.write_joints("0 0 2\n", "second.txt")
        links, _ = run([first, second, a], self.conf)

        np.testing.assert_allclose(links[0].visual_origin, [0, 0, -2])

    def test_no_mesh(self):
        with self.assertRaises(UsageError):
            run([], self.conf)
        with self.assertRaises(UsageError):
            run(["2.0", self.write_joints("1 0 0\n")], self.conf)

    def test_import_failure_aborts(self):
        a = self.export_box("a.stl", [1, 1, 1])
        with self.assertRaises(MeshImportError):
            run([a, str(self.temp_dir / "missing.stl")], self.conf)

    def test_zero_volume_total(self):
        vertices = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]], dtype=np.float64)
        mesh = trimesh.Trimesh(vertices=vertices, faces=[[0, 1, 2], [0, 2, 1]], process=False)
        path = self.temp_dir / "flat.ply"
        mesh.export(str(path))
        with self.assertRaises(DegenerateGeometryError):
            run([str(path)], self.conf)


class TestReport(unittest.TestCase):
    """测试 URDF 片段格式"""

    def setUp(self):
        self.link = NormalizedLink(
            name="arm.stl",
            mass=1.0,
            center_of_mass=np.array([0.5, -0.25, 0.0]),
            inertia=np.array([[1 / 6, -0.01, 0.0], [-0.01, 0.2, 0.0], [0.0, 0.0, 0.3]]),
            visual_origin=np.array([-1.0, 0.0, 0.0]),
        )

    def test_format_link(self):
        text = format_link(self.link)
        lines = text.splitlines()

        self.assertEqual(lines[0], "arm.stl:")
        self.assertIn('<mass value="1.000000" />', text)
        self.assertIn('xyz="00.50000000000 -0.25000000000 00.00000000000"', text)
        self.assertIn('ixx="00.16666666667" ixy="-0.01000000000" ixz="00.00000000000"', text)
        self.assertTrue(lines[5].startswith(" " * 42 + 'iyy="00.20000000000"'))
        self.assertTrue(lines[6].startswith(" " * 63 + 'izz="00.30000000000"'))
        self.assertIn('<origin rpy="0 0 0" xyz="-1.00000000000 00.00000000000 00.00000000000" />', text)
        self.assertIn('<mesh filename="model://arm.stl" />', text)
        self.assertTrue(text.endswith("</visual>\n"))

    def test_uri_prefix(self):
        text = format_link(self.link, uri_prefix="package://robot/")
        self.assertIn('<mesh filename="package://robot/arm.stl" />', text)

    def test_format_report_header(self):
        text = format_report([self.link, self.link], 2.0)
        self.assertTrue(text.startswith("URDF data for 2 links with overall mass of 2.000 kg:\n"))
        self.assertEqual(text.count("<inertial>"), 2)

    def test_save_urdf(self):
        temp_dir = Path(tempfile.mkdtemp())
        try:
            path = save_urdf("content\n", temp_dir / "out" / "links.urdf")
            self.assertEqual(path.read_text(), "content\n")
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)


class TestCommandLine(PipelineTestCase):
    """测试 CLI 退出码和输出"""

    def call(self, argv):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = main(argv)
        return code, buffer.getvalue()

    def test_success(self):
        a = self.export_box("a.stl", [1, 1, 1])
        b = self.export_box("b.stl", [1, 1, 1])
        output = self.temp_dir / "links.txt"
        code, stdout = self.call([a, b, "2.0", "--output", str(output)])

        self.assertEqual(code, 0)
        self.assertTrue(stdout.startswith("URDF data for 2 links with overall mass of 2.000 kg:"))
        self.assertEqual(stdout.count('<mass value="1.000000" />'), 2)
        self.assertEqual(output.read_text(), stdout)

    def test_no_arguments(self):
        code, stdout = self.call([])
        self.assertNotEqual(code, 0)
        self.assertEqual(stdout, "")

    def test_missing_mesh(self):
        a = self.export_box("a.stl", [1, 1, 1])
        code, stdout = self.call([a, str(self.temp_dir / "missing.stl")])
        self.assertNotEqual(code, 0)
        self.assertEqual(stdout, "")

    def test_config_override(self):
        a = self.export_box("a.stl", [1, 1, 1])
        code, stdout = self.call([a, "--set", "report.uri_prefix=package://robot/", "--set", "mass.default=4"])
        self.assertEqual(code, 0)
        self.assertIn('filename="package://robot/', stdout)
        self.assertIn("overall mass of 4.000 kg", stdout)

    def test_invalid_config(self):
        a = self.export_box("a.stl", [1, 1, 1])
        code, _ = self.call([a, "--set", "mass.default=-2"])
        self.assertNotEqual(code, 0)

    def test_non_numeric_config_value(self):
        a = self.export_box("a.stl", [1, 1, 1])
        code, stdout = self.call([a, "--set", "mass.default=abc"])
        self.assertEqual(code, 1)
        self.assertEqual(stdout, "")

    def test_unwritable_output(self):
        """输出路径不可写: 返回 1, stdout 为空"""
        a = self.export_box("a.stl", [1, 1, 1])
        blocker = self.temp_dir / "blocker"
        blocker.write_text("regular file")
        code, stdout = self.call([a, "--output", str(blocker / "sub" / "out.urdf")])

        self.assertEqual(code, 1)
        self.assertEqual(stdout, "")


if __name__ == "__main__":
    unittest.main()
