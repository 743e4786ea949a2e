from decimal import Decimal

from django.test import SimpleTestCase

from .utils import calculate_distance


class CalculateDistanceTests(SimpleTestCase):
	def test_same_point_is_zero(self):
		self.assertEqual(calculate_distance(59.3293, 18.0686, 59.3293, 18.0686), 0.0)

	def test_symmetric(self):
		there = calculate_distance(59.3293, 18.0686, 57.7089, 11.9746)
		back = calculate_distance(57.7089, 11.9746, 59.3293, 18.0686)

		self.assertAlmostEqual(there, back, places=9)

	def test_one_degree_along_equator(self):
		self.assertAlmostEqual(calculate_distance(0, 0, 0, 1), 111.195, delta=0.01)

	def test_stockholm_to_uppsala_with_decimals(self):
		distance = calculate_distance(
			Decimal('59.329300'), Decimal('18.068600'),
			Decimal('59.858600'), Decimal('17.638900'),
		)

		self.assertAlmostEqual(distance, 63.6, delta=1.5)

	def test_antipodal_points(self):
		self.assertAlmostEqual(calculate_distance(0, 0, 0, 180), 20015.09, delta=0.1)
